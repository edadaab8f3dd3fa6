class XsdGenException(Exception):
	pass


class ValidationError(XsdGenException):
	def __init__(self, field: str, message: str = ""):
		self.field = field
		super(ValidationError, self).__init__(message or "{} must not be empty".format(field))


class ResolutionError(XsdGenException):
	pass


class DuplicateDefinitionError(XsdGenException):
	pass


class UnresolvedReferenceError(XsdGenException):
	pass


class CyclicTypeError(XsdGenException):
	pass


class UnsupportedConstructError(XsdGenException):
	construct: str = ""
	location: str = ""

	def __init__(self, construct: str, location: str = "", detail: str = ""):
		self.construct = construct
		self.location = location
		message = "Unsupported construct {}".format(construct)
		if location != "":
			message += " at " + location
		if detail != "":
			message += ": " + detail
		super(UnsupportedConstructError, self).__init__(message)


class SchemaIOError(XsdGenException):
	def __init__(self, path: str, error: OSError):
		self.path = path
		super(SchemaIOError, self).__init__("{}: {}".format(path, error.strerror or error))


class SchemaSyntaxError(XsdGenException):
	pass
