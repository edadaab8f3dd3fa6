from .errors import (
	CyclicTypeError,
	DuplicateDefinitionError,
	ResolutionError,
	SchemaIOError,
	SchemaSyntaxError,
	UnresolvedReferenceError,
	UnsupportedConstructError,
	ValidationError,
	XsdGenException,
)
from .generators import CodeGenerator, get_generator, to_title, with_extension
from .model import EntityKind, Field, FieldKind, QName, SchemaEntity
from .options import LANGUAGES, ParseOptions, validate_options
from .parser import Parser, parse
from .prototype import PrototypeTree

__version__ = "0.1.0"
