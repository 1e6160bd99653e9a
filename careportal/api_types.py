"""API request/response contracts.

Runtime behavior does not depend on these definitions; they document the
camelCase JSON shapes and keep the service mappers honest under mypy.
"""

from __future__ import annotations

from typing import Literal, TypedDict


class UserDto(TypedDict):
    id: str
    firstName: str
    lastName: str
    email: str
    role: str
    roleDisplayName: str
    isActive: bool
    createdAt: str | None
    lastLoginAt: str | None
    fullName: str


class AuthData(TypedDict):
    token: str
    refreshToken: str
    user: UserDto


class AuthResponse(TypedDict, total=False):
    success: bool
    message: str
    data: AuthData


class ClientDto(TypedDict):
    id: int
    firstName: str
    lastName: str
    fullName: str
    dateOfBirth: str | None
    age: int
    address: str | None
    phoneNumber: str | None
    email: str | None
    createdAt: str | None
    updatedAt: str | None
    isActive: bool
    assignedStaffId: str | None
    assignedStaffName: str | None


class JobTimeDto(TypedDict):
    id: int
    clientId: int
    clientName: str
    staffId: str
    staffName: str
    startTime: str | None
    endTime: str | None
    activityType: int
    activityTypeDisplayName: str
    notes: str | None
    createdAt: str | None
    updatedAt: str | None
    isActive: bool
    duration: str | None
    isCompleted: bool


class IncidentDto(TypedDict):
    id: int
    clientId: int
    clientName: str
    staffId: str
    staffName: str
    title: str
    description: str | None
    incidentDate: str | None
    incidentTime: str | None
    location: str | None
    fileName: str | None
    isActive: bool
    status: int
    severity: int
    statusDisplayName: str
    severityDisplayName: str
    createdAt: str | None
    updatedAt: str | None


DocumentStatusText = Literal["pending", "upload", "overdue"]


class DocumentDto(TypedDict):
    id: int
    clientId: int
    clientName: str
    title: str
    description: str | None
    fileName: str
    fileType: str
    createdAt: str | None
    uploadedBy: str
    isActive: bool
    deadline: str | None
    status: DocumentStatusText


ActivityKind = Literal["job_time", "incident", "document", "client"]


class RecentActivity(TypedDict):
    id: str
    type: ActivityKind
    title: str
    description: str
    createdAt: str | None
    createdBy: str
    relatedEntityName: str
    activityTypeDisplayName: str | None


class DashboardStats(TypedDict):
    totalClients: int
    activeClients: int
    totalUsers: int
    activeUsers: int
    totalJobTimes: int
    todayJobTimes: int
    totalIncidents: int
    openIncidents: int
    totalDocuments: int
    pendingDocuments: int
    totalHoursThisWeek: float
    averageHoursPerDay: float


class Dashboard(TypedDict):
    stats: DashboardStats
    recentActivities: list[RecentActivity]


class MetadataItem(TypedDict):
    paramKey: str
    paramValue: str
    paramValueInt: int


class MetadataGroup(TypedDict):
    type: str
    metadata: list[MetadataItem]


class FileInfo(TypedDict):
    fileName: str
    originalFileName: str
    fileSize: int
    fileType: str
    uploadType: str
    createdAt: str
    lastModified: str


__all__ = [
    "UserDto",
    "AuthData",
    "AuthResponse",
    "ClientDto",
    "JobTimeDto",
    "IncidentDto",
    "DocumentDto",
    "DocumentStatusText",
    "RecentActivity",
    "DashboardStats",
    "Dashboard",
    "MetadataItem",
    "MetadataGroup",
    "FileInfo",
]
