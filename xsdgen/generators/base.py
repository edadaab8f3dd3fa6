import re
from io import StringIO, TextIOBase

from ..errors import UnsupportedConstructError
from ..model import ANONYMOUS_SPACE, EntityKind, FieldKind, Reference, SchemaEntity
from ..options import ParseOptions
from ..prototype import REFERENCE_ONLY, PrototypeTree

# xsd builtin -> primitive category shared by all generators
xs_type_map: dict = {
	"string": "string",
	"normalizedString": "string",
	"token": "string",
	"language": "string",
	"Name": "string",
	"NCName": "string",
	"NMTOKEN": "string",
	"NMTOKENS": "string",
	"ID": "string",
	"IDREF": "string",
	"IDREFS": "string",
	"ENTITY": "string",
	"ENTITIES": "string",
	"QName": "string",
	"NOTATION": "string",
	"anyURI": "string",
	"boolean": "boolean",
	"integer": "integer",
	"nonNegativeInteger": "integer",
	"positiveInteger": "integer",
	"nonPositiveInteger": "integer",
	"negativeInteger": "integer",
	"byte": "int8",
	"short": "int16",
	"int": "int32",
	"long": "int64",
	"unsignedByte": "uint8",
	"unsignedShort": "uint16",
	"unsignedInt": "uint32",
	"unsignedLong": "uint64",
	"float": "float32",
	"double": "float64",
	"decimal": "decimal",
	"date": "date",
	"gYear": "date",
	"gYearMonth": "date",
	"gMonth": "date",
	"gMonthDay": "date",
	"gDay": "date",
	"time": "time",
	"dateTime": "datetime",
	"dateTimeStamp": "datetime",
	"duration": "duration",
	"dayTimeDuration": "duration",
	"yearMonthDuration": "duration",
	"base64Binary": "bytes",
	"hexBinary": "bytes",
	"anyType": "any",
	"anySimpleType": "any",
	"anyAtomicType": "any",
}


def primitive_category(builtin: str) -> str:
	return xs_type_map.get(builtin, "any")


_word_start = re.compile(r"(?:^|(?<=\s))(\S)")


def to_title(text: str) -> str:
	return _word_start.sub(lambda m: m.group(1).title(), text)


def to_identifier(text: str, prefix: str = "X") -> str:
	ident = "".join(to_title(part) for part in re.split(r"[\W_]+", text) if part != "")
	if ident != "" and ident[0].isdigit():
		ident = prefix + ident
	return ident


def enum_identifiers(values: list) -> list:
	"""Map enumeration literals to unique identifiers, in order.

	Literals that collapse to the same identifier (differing only in case or
	punctuation) get a numeric suffix, so the mapping is deterministic for a
	given literal sequence.
	"""
	used = set()
	idents = []
	for value in values:
		base = to_identifier(value, "Value") or "Value"
		ident = base
		counter = 1
		while ident in used:
			counter += 1
			ident = "{}{}".format(base, counter)
		used.add(ident)
		idents.append(ident)
	return idents


def with_extension(filename: str, extension: str) -> str:
	if extension == "":
		return filename
	if not extension.startswith("."):
		extension = "." + extension
	if filename.endswith(extension):
		return filename
	return filename + extension


def quote(value: str) -> str:
	escaped = value.replace("\\", "\\\\").replace("\"", "\\\"").replace("\n", "\\n").replace("\t", "\\t")
	return "\"" + escaped + "\""


class FieldShape:
	ident: str = ""
	name: str = ""
	kind: FieldKind = FieldKind.Element
	type_ref: Reference = None
	optional: bool = False
	collection: bool = False
	documentation: str = ""

	def __repr__(self):
		return "{}({}{}{})".format(self.ident, self.name, "?" if self.optional else "", "[]" if self.collection else "")


def field_shapes(entity: SchemaEntity) -> list:
	shapes = []
	used = set()
	for field in entity.fields or []:
		shape = FieldShape()
		shape.name = field.name
		shape.kind = field.kind
		shape.type_ref = field.type_ref
		shape.optional = field.optional
		shape.collection = field.collection
		shape.documentation = field.documentation

		ident = to_identifier(field.name) or "Field"
		if ident in used and field.kind is FieldKind.Attribute:
			ident += "Attr"
		base = ident
		counter = 1
		while ident in used:
			counter += 1
			ident = "{}{}".format(base, counter)
		used.add(ident)
		shape.ident = ident
		shapes.append(shape)
	return shapes


def namespace_prefix(namespace: str) -> str:
	# last segment of the namespace that carries a letter, "urn:acme:billing" -> "Billing"
	segments = [s for s in re.split(r"[/:#]+", namespace or "") if re.search(r"[^\W\d_]", s)]
	if len(segments) == 0:
		return ""
	return to_identifier(re.sub(r"\.xsd$", "", segments[-1]))


def name_rank(entity: SchemaEntity) -> int:
	if entity.anonymous:
		return 2
	return 1 if entity.kind is EntityKind.Element else 0


def assign_names(tree: PrototypeTree) -> dict:
	"""Give every named entity of the arena one type identifier, unique in the output.

	The root file's named types claim plain identifiers first, then its
	elements and its hoisted inline types, then everything only reachable
	through includes and imports. On a clash an entity of a foreign namespace
	gets the prefix of its namespace, an element an ``Element`` suffix and an
	inline type a ``Type`` suffix, before falling back to a counter.
	"""
	emitted = [entity.key() for entity in tree]
	# an element emitted in place of its inline type shares its identifier
	shared = {}
	for entity in tree:
		if entity.kind is EntityKind.Element and entity.type_ref is not None and entity.type_ref.space == ANONYMOUS_SPACE:
			shared[entity.type_ref.target] = entity.key()
	others = [key for key, entity in tree.entities.items()
		if key not in emitted and key not in shared and entity.kind not in REFERENCE_ONLY]

	names = {}
	used = set()
	rank = lambda k: name_rank(tree.entities[k])
	for key in sorted(emitted, key=rank) + sorted(others, key=rank):
		entity = tree.entities[key]
		base = to_identifier(entity.qname.local) or "Type"
		ident = base
		if ident in used:
			prefix = namespace_prefix(entity.qname.namespace)
			if entity.qname.namespace != tree.target_namespace and prefix != "":
				ident = prefix + base
			elif entity.kind is EntityKind.Element:
				ident = base + "Element"
			elif entity.anonymous:
				ident = base + "Type"
		candidate = ident
		counter = 1
		while candidate in used:
			counter += 1
			candidate = "{}{}".format(ident, counter)
		used.add(candidate)
		names[key] = candidate

	for target, key in shared.items():
		if target not in names:
			names[target] = names[key]
	return names


class CodeGenerator:
	"""Base class of the per-language emitters.

	Subclasses provide ``lang``, ``extension`` and a ``type_map`` from
	primitive category to native type, and the ``write_*`` methods that
	render one entity kind each.
	"""

	lang: str = ""
	extension: str = ""
	type_map: dict = {}
	file: str = ""
	tree: PrototypeTree = None
	options: ParseOptions = None
	names: dict = {}

	def __init__(self, file: str = ""):
		self.file = file

	def file_with_extension(self, extension: str = None) -> str:
		return with_extension(self.file, self.extension if extension is None else extension)

	def handlers(self) -> dict:
		return {
			EntityKind.ComplexType: self.write_aggregate,
			EntityKind.Element: self.write_element,
			EntityKind.SimpleType: self.write_alias,
			EntityKind.Enumeration: self.write_enum,
			EntityKind.List: self.write_list,
		}

	def generate(self, tree: PrototypeTree, options: ParseOptions) -> str:
		self.tree = tree
		self.options = options
		handlers = self.handlers()
		self.names = assign_names(tree)
		out = StringIO()
		self.write_begin(out)
		for entity in self.ordered(tree):
			if entity.kind not in handlers:
				raise UnsupportedConstructError(entity.node_kind, entity.source, "no {} representation for {}".format(self.lang, entity.kind.value))
			handlers[entity.kind](out, entity)
		self.write_end(out)
		return out.getvalue()

	def ordered(self, tree: PrototypeTree) -> list:
		return list(tree)

	def type_name(self, entity: SchemaEntity) -> str:
		if entity.key() in self.names:
			return self.names[entity.key()]
		return to_identifier(entity.qname.local)

	def native_type(self, ref: Reference) -> str:
		if ref.is_builtin():
			return self.type_map[primitive_category(ref.builtin)]
		return self.type_name(self.tree.lookup(ref))

	def base_native_type(self, entity: SchemaEntity) -> str:
		if entity.kind is EntityKind.Element:
			return self.native_type(entity.type_ref)
		return self.native_type(entity.base)

	def write_element(self, out: TextIOBase, entity: SchemaEntity):
		if entity.fields is not None:
			self.write_aggregate(out, entity)
		else:
			self.write_alias(out, entity)

	def write_comment(self, out: TextIOBase, text: str, prefix: str = "// ", indent: str = ""):
		if text != "":
			out.write("{}{}{}\n".format(indent, prefix, text))

	def write_begin(self, out: TextIOBase):
		pass

	def write_end(self, out: TextIOBase):
		pass

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		raise NotImplementedError()

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		raise NotImplementedError()

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		raise NotImplementedError()

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		raise NotImplementedError()
