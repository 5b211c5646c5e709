"""Constants for ScholarSync."""

DOMAIN = "scholarsync"

# Configuration
ENV_PREFIX = "SCHOLARSYNC_"
CONF_BACKEND = "backend"
CONF_API_URL = "api_url"
CONF_API_KEY = "api_key"
CONF_LATENCY_SCALE = "latency_scale"
CONF_LOG_LEVEL = "log_level"

BACKEND_MEMORY = "memory"
BACKEND_REMOTE = "remote"
BACKENDS = [BACKEND_MEMORY, BACKEND_REMOTE]

# Default values
DEFAULT_BACKEND = BACKEND_MEMORY
DEFAULT_LATENCY_SCALE = 1.0
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_AUTHOR = "Current User"
NOTIFICATION_HISTORY_SIZE = 50

# Simulated latency of the in-memory store, in seconds per operation kind
OP_GET_ALL = "get_all"
OP_GET_BY_ID = "get_by_id"
OP_CREATE = "create"
OP_UPDATE = "update"
OP_DELETE = "delete"
OPERATION_DELAYS = {
	OP_GET_ALL: 0.3,
	OP_GET_BY_ID: 0.2,
	OP_CREATE: 0.4,
	OP_UPDATE: 0.35,
	OP_DELETE: 0.25,
}

# Tables, shared by the fixture files and the remote store
TABLE_STUDENTS = "student"
TABLE_CLASSES = "class"
TABLE_ATTENDANCE = "attendance"
TABLE_GRADES = "grade"
TABLE_ANNOUNCEMENTS = "announcement"

FIXTURE_FILES = {
	TABLE_STUDENTS: "students.json",
	TABLE_CLASSES: "classes.json",
	TABLE_ATTENDANCE: "attendance.json",
	TABLE_GRADES: "grades.json",
	TABLE_ANNOUNCEMENTS: "announcements.json",
}

# Attendance statuses
STATUS_PRESENT = "present"
STATUS_ABSENT = "absent"
STATUS_LATE = "late"
ATTENDANCE_STATUSES = [STATUS_PRESENT, STATUS_ABSENT, STATUS_LATE]

# Hour (UTC) stamped on attendance records created for a calendar day
ATTENDANCE_HOUR = 8

# Announcement audiences
AUDIENCE_ALL = "all"
AUDIENCE_STUDENTS = "students"
AUDIENCE_STAFF = "staff"
AUDIENCE_PARENTS = "parents"
AUDIENCES = [AUDIENCE_ALL, AUDIENCE_STUDENTS, AUDIENCE_STAFF, AUDIENCE_PARENTS]

# Letter grade bands, lower bound inclusive
LETTER_GRADE_BANDS = [
	(90, "A"),
	(80, "B"),
	(70, "C"),
	(60, "D"),
]
FAILING_GRADE = "F"
NOT_AVAILABLE = "N/A"

# Dashboard
DASHBOARD_SCHEDULE_SIZE = 4
DASHBOARD_ANNOUNCEMENT_COUNT = 3

# Notification levels
LEVEL_SUCCESS = "success"
LEVEL_ERROR = "error"
LEVEL_INFO = "info"

# Page states
STATE_IDLE = "idle"
STATE_LOADING = "loading"
STATE_READY = "ready"
STATE_ERROR = "error"
