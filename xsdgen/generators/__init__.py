from ..errors import ValidationError
from ..options import normalize_lang
from .base import CodeGenerator, enum_identifiers, field_shapes, primitive_category, to_identifier, to_title, with_extension
from .c import CGenerator
from .go import GoGenerator
from .java import JavaGenerator
from .rust import RustGenerator
from .typescript import TypeScriptGenerator

generators: dict = {
	"Go": GoGenerator,
	"TypeScript": TypeScriptGenerator,
	"C": CGenerator,
	"Java": JavaGenerator,
	"Rust": RustGenerator,
}


def get_generator(lang: str, file: str = "") -> CodeGenerator:
	known = normalize_lang(lang)
	if known not in generators:
		raise ValidationError("language", "unknown language {}".format(lang))
	return generators[known](file)
