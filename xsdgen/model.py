from collections import namedtuple
from enum import Enum

XS_NS = "http://www.w3.org/2001/XMLSchema"
XML_NS = "http://www.w3.org/XML/1998/namespace"

UNBOUNDED = -1


class EntityKind(Enum):
	SimpleType = "simpleType"
	ComplexType = "complexType"
	Element = "element"
	Attribute = "attribute"
	Group = "group"
	AttributeGroup = "attributeGroup"
	Enumeration = "enumeration"
	List = "list"
	Restriction = "restriction"
	Extension = "extension"


class FieldKind(Enum):
	Element = "element"
	Attribute = "attribute"
	Text = "text"


# symbol spaces, see XSD 1.0 part 1, 2.5
TYPE_SPACE = "type"
ANONYMOUS_SPACE = "anonymous"

_spaces: dict = {
	EntityKind.SimpleType: TYPE_SPACE,
	EntityKind.ComplexType: TYPE_SPACE,
	EntityKind.Enumeration: TYPE_SPACE,
	EntityKind.List: TYPE_SPACE,
	EntityKind.Element: "element",
	EntityKind.Attribute: "attribute",
	EntityKind.Group: "group",
	EntityKind.AttributeGroup: "attributeGroup",
}


def symbol_space(kind: EntityKind) -> str:
	return _spaces[kind]


class QName(namedtuple("QName", ["namespace", "local"])):
	__slots__ = ()

	def __str__(self):
		if self.namespace:
			return "{" + self.namespace + "}" + self.local
		return self.local


class Reference:
	"""A named reference to a type, element, attribute or group.

	References are looked up by key after the whole include/import closure
	has been parsed; a ``namespace`` of None marks an unprefixed name that
	is disambiguated at that point.
	"""

	raw: str = ""
	local: str = ""
	namespace: str = None
	space: str = TYPE_SPACE
	# filled in by the prototype tree builder
	target: tuple = None
	builtin: str = ""

	def __init__(self, raw: str, local: str, namespace: str = None, space: str = TYPE_SPACE):
		self.raw = raw
		self.local = local
		self.namespace = namespace
		self.space = space

	def __repr__(self):
		if self.builtin != "":
			return "xs:" + self.builtin
		return self.raw

	def is_builtin(self) -> bool:
		return self.builtin != ""

	def is_resolved(self) -> bool:
		return self.builtin != "" or self.target is not None


class Directive:
	is_import: bool = False
	location: str = ""
	namespace: str = ""
	source: str = ""

	def __init__(self, location: str, namespace: str = "", is_import: bool = False, source: str = ""):
		self.location = location
		self.namespace = namespace
		self.is_import = is_import
		self.source = source

	def __repr__(self):
		return "{}({}, {})".format("import" if self.is_import else "include", self.location, self.namespace)


class Member:
	"""A particle or attribute use inside a content model, before flattening."""

	kind: EntityKind = EntityKind.Element
	name: str = ""
	type_ref: Reference = None
	ref: Reference = None
	min_occurs: int = 1
	max_occurs: int = 1
	documentation: str = ""
	location: str = ""
	# an attribute use removed from the base by a restriction
	prohibited: bool = False

	def __repr__(self):
		target = self.ref or self.type_ref
		return "{} {}: {} [{}:{}]".format(self.kind.value, self.name, target, self.min_occurs, self.max_occurs)


class Field:
	name: str = ""
	kind: FieldKind = FieldKind.Element
	type_ref: Reference = None
	optional: bool = False
	collection: bool = False
	documentation: str = ""

	def __init__(self, name: str, kind: FieldKind, type_ref: Reference, optional: bool = False, collection: bool = False):
		self.name = name
		self.kind = kind
		self.type_ref = type_ref
		self.optional = optional
		self.collection = collection

	def __repr__(self):
		shape = ""
		if self.optional:
			shape += "?"
		if self.collection:
			shape += "[]"
		return "{}{}: {}".format(self.name, shape, self.type_ref)


class SchemaEntity:
	kind: EntityKind
	qname: QName
	source: str = ""
	documentation: str = ""
	node_kind: str = ""
	anonymous: bool = False

	# complex types, groups, attribute groups
	members: list
	base: Reference = None
	derivation: EntityKind = None
	simple_content: bool = False
	mixed: bool = False
	# simple types
	values: list
	item_type: Reference = None
	# top level elements and attributes
	type_ref: Reference = None

	# resolved, flattened fields; set by the prototype tree builder
	fields: list = None

	def __init__(self, kind: EntityKind, qname: QName, source: str = "", node_kind: str = ""):
		self.kind = kind
		self.qname = qname
		self.source = source
		self.node_kind = node_kind or "xs:" + kind.value
		self.members = []
		self.values = []

	def __repr__(self):
		return "{}[{}]".format(self.kind.value, self.qname)

	def key(self) -> tuple:
		if self.anonymous:
			# inline types are only visible inside their own document
			return ANONYMOUS_SPACE, self.qname, self.source
		return symbol_space(self.kind), self.qname

	def is_aggregate(self) -> bool:
		return self.kind in (EntityKind.ComplexType, EntityKind.Element) and self.fields is not None
