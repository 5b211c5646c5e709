"""Custom exceptions for ScholarSync."""


class ScholarSyncError(Exception):
	"""Base exception for ScholarSync errors."""
	pass


class ScholarSyncNotFoundError(ScholarSyncError):
	"""No stored record matches the requested id."""
	pass


class ScholarSyncValidationError(ScholarSyncError):
	"""The backing store rejected every record of a mutation."""
	
	def __init__(self, message: str, failures=None):
		super().__init__(message)
		self.failures = failures or []


class ScholarSyncAuthError(ScholarSyncError):
	"""The remote store refused our credentials."""
	pass


class ScholarSyncAPIError(ScholarSyncError):
	"""The remote store answered with an HTTP error or an unsuccessful envelope."""
	pass


class ScholarSyncConnectionError(ScholarSyncError):
	"""The remote store could not be reached."""
	pass


class ScholarSyncDataError(ScholarSyncError):
	"""A record, row, form value or response body has the wrong shape."""
	pass


class ScholarSyncConfigError(ScholarSyncError):
	"""Invalid or incomplete configuration."""
	pass


# The backing call could not be completed at all
TRANSPORT_ERRORS = (
	ScholarSyncConnectionError,
	ScholarSyncAPIError,
	ScholarSyncAuthError,
)

# A list fetch that ends in one of these yields an empty, failed RecordList
FETCH_ERRORS = TRANSPORT_ERRORS + (ScholarSyncDataError,)
