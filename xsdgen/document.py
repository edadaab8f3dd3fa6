import logging
import re
from io import BytesIO
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, iterparse

from .errors import ResolutionError, SchemaSyntaxError, UnresolvedReferenceError, UnsupportedConstructError
from .model import ANONYMOUS_SPACE, TYPE_SPACE, UNBOUNDED, XML_NS, XS_NS, Directive, EntityKind, Member, QName, Reference, SchemaEntity
from .options import ParseOptions

logger = logging.getLogger(__name__)

FACETS: set = {
	"xs:length", "xs:minLength", "xs:maxLength", "xs:pattern", "xs:whiteSpace",
	"xs:totalDigits", "xs:fractionDigits", "xs:minInclusive", "xs:maxInclusive",
	"xs:minExclusive", "xs:maxExclusive", "xs:explicitTimezone",
}


def clean_text(text: str) -> str:
	return re.sub(r"\s+", " ", text or "").strip()


def multiply_occurs(a: int, b: int) -> int:
	if a == 0 or b == 0:
		return 0
	if a == UNBOUNDED or b == UNBOUNDED:
		return UNBOUNDED
	return a * b


class SchemaDocument:
	source: str = ""
	target_namespace: str = ""
	declarations: list
	directives: list

	def __init__(self, source: str):
		self.source = source
		self.declarations = []
		self.directives = []

	def __repr__(self):
		return "SchemaDocument{" + self.source + ", ns='" + self.target_namespace + "', " + \
			str(len(self.declarations)) + " declarations, " + str(self.directives) + "}"


class DocumentParser:
	"""Reads one XSD document into raw declarations and include/import directives.

	Names are not looked up here: every type, element and group reference is
	kept as a ``Reference`` carrying the namespace its prefix was bound to in
	the scope of the referencing node.
	"""

	options: ParseOptions
	document: SchemaDocument
	scopes: dict
	anonymous_names: set

	def __init__(self, options: ParseOptions, source: str, include_namespace: str = None):
		self.options = options
		self.include_namespace = include_namespace
		self.document = SchemaDocument(source)
		self.scopes = {}
		self.anonymous_names = set()

	def ns_replace(self, tag: str) -> str:
		return tag.replace("{" + XS_NS + "}", "xs:")

	def read_tree(self, data: bytes) -> Element:
		root = None
		stack = [{"xml": XML_NS}]
		pending = {}
		try:
			for event, item in iterparse(BytesIO(data), events=("start-ns", "start", "end")):
				if event == "start-ns":
					prefix, uri = item
					pending[prefix or ""] = uri
				elif event == "start":
					scope = dict(stack[-1])
					scope.update(pending)
					pending = {}
					stack.append(scope)
					self.scopes[item] = scope
					if root is None:
						root = item
				else:
					stack.pop()
		except ParseError as exc:
			raise SchemaSyntaxError("{} is not well-formed XML: {}".format(self.document.source, exc)) from exc
		except DefusedXmlException as exc:
			raise SchemaSyntaxError("{} was rejected: {}".format(self.document.source, exc)) from exc
		return root

	def location(self, owner: str) -> str:
		if owner == "":
			return self.document.source
		return "{} ({})".format(self.document.source, owner)

	def unsupported(self, node: Element, owner: str, detail: str = ""):
		error = UnsupportedConstructError(self.ns_replace(node.tag), self.location(owner), detail)
		if not self.options.best_effort:
			raise error
		logger.warning("skipping %s", error)
		self.options.warnings.append(error)

	def read_documentation(self, node: Element) -> str:
		docs = []
		for ann in node.findall("{%s}annotation" % XS_NS):
			for doc in ann.findall("{%s}documentation" % XS_NS):
				text = clean_text(" ".join(doc.itertext()))
				if text:
					docs.append(text)
		return " ".join(docs)

	def read_occurs(self, node: Element) -> (int, int):
		min_occurs = node.attrib["minOccurs"] if "minOccurs" in node.attrib else 1
		max_occurs = node.attrib["maxOccurs"] if "maxOccurs" in node.attrib else 1
		return int(min_occurs), UNBOUNDED if max_occurs == "unbounded" else int(max_occurs)

	def read_reference(self, node: Element, attr: str, space: str = TYPE_SPACE) -> Reference:
		raw = node.attrib[attr].strip()
		scope = self.scopes.get(node, {})
		if ":" in raw:
			prefix, local = raw.split(":", 1)
			if prefix not in scope:
				raise UnresolvedReferenceError("Unknown namespace prefix '{}' in {}=\"{}\" in {}".format(prefix, attr, raw, self.document.source))
			namespace = scope[prefix]
		else:
			local = raw
			namespace = scope.get("")

		ref = Reference(raw, local, namespace, space)
		if namespace == XS_NS and space == TYPE_SPACE:
			ref.builtin = local
		elif namespace == XML_NS:
			ref.builtin = "string"
		return ref

	def anonymous_qname(self, name: str) -> QName:
		candidate = name
		counter = 1
		while candidate in self.anonymous_names:
			counter += 1
			candidate = "{}{}".format(name, counter)
		self.anonymous_names.add(candidate)
		return QName(self.document.target_namespace, candidate)

	def hoist(self, node: Element, name: str) -> Reference:
		qname = self.anonymous_qname(name)
		if self.ns_replace(node.tag) == "xs:complexType":
			entity = self.read_complex_type(node, qname)
		else:
			entity = self.read_simple_type(node, qname)
		entity.anonymous = True
		self.document.declarations.append(entity)
		ref = Reference(qname.local, qname.local, qname.namespace, ANONYMOUS_SPACE)
		ref.target = entity.key()
		return ref

	def read_declared_type(self, node: Element, anon_name: str, default: str) -> Reference:
		if "type" in node.attrib:
			return self.read_reference(node, "type")
		for child in node:
			nstag = self.ns_replace(child.tag)
			if nstag == "xs:complexType" or nstag == "xs:simpleType":
				return self.hoist(child, anon_name)
		ref = Reference("xs:" + default, default, XS_NS)
		ref.builtin = default
		return ref

	def check_element_children(self, node: Element, owner: str):
		for child in node:
			nstag = self.ns_replace(child.tag)
			if nstag in ("xs:key", "xs:keyref", "xs:unique", "xs:alternative"):
				self.unsupported(child, owner, "identity constraints and type alternatives have no structural representation")

	def read_element_member(self, node: Element, owner: str, min_occurs: int, max_occurs: int) -> Member:
		member = Member()
		member.kind = EntityKind.Element
		member.min_occurs = min_occurs
		member.max_occurs = max_occurs
		member.documentation = self.read_documentation(node)
		member.location = self.location(owner)
		if "ref" in node.attrib:
			member.ref = self.read_reference(node, "ref", "element")
			member.name = member.ref.local
		elif "name" in node.attrib:
			member.name = node.attrib["name"]
			member.type_ref = self.read_declared_type(node, owner + "." + member.name, "anyType")
		else:
			raise SchemaSyntaxError("xs:element without name or ref in {}".format(member.location))
		self.check_element_children(node, owner + "." + member.name)
		return member

	def read_attribute_member(self, node: Element, owner: str) -> Member:
		member = Member()
		member.kind = EntityKind.Attribute
		member.location = self.location(owner)
		member.documentation = self.read_documentation(node)
		use = node.attrib.get("use", "optional").lower()
		member.min_occurs = 1 if use == "required" else 0
		member.prohibited = use == "prohibited"
		if "ref" in node.attrib:
			member.ref = self.read_reference(node, "ref", "attribute")
			member.name = member.ref.local
			if member.ref.namespace == XML_NS:
				# xml:lang and friends need no declaration
				member.ref = None
				member.type_ref = Reference("xs:string", "string", XS_NS)
				member.type_ref.builtin = "string"
		elif "name" in node.attrib:
			member.name = node.attrib["name"]
			member.type_ref = self.read_declared_type(node, owner + "." + member.name, "anySimpleType")
		else:
			raise SchemaSyntaxError("xs:attribute without name or ref in {}".format(member.location))
		return member

	def read_group_member(self, node: Element, kind: EntityKind, space: str, min_occurs: int = 1, max_occurs: int = 1) -> Member:
		member = Member()
		member.kind = kind
		member.ref = self.read_reference(node, "ref", space)
		member.name = member.ref.local
		member.min_occurs = min_occurs
		member.max_occurs = max_occurs
		member.location = self.location(member.name)
		return member

	def read_content(self, node: Element, entity: SchemaEntity, min_factor: int = 1, max_factor: int = 1, choice: bool = False):
		owner = entity.qname.local
		for child in node:
			if not isinstance(child.tag, str):
				continue
			nstag = self.ns_replace(child.tag)
			if not nstag.startswith("xs:"):
				# application specific annotations
				continue
			if nstag == "xs:annotation":
				continue

			if nstag in ("xs:sequence", "xs:choice", "xs:all", "xs:element", "xs:group"):
				omin, omax = self.read_occurs(child)
				if choice:
					omin = 0
				omin = multiply_occurs(omin, min_factor)
				omax = multiply_occurs(omax, max_factor)
				if nstag == "xs:element":
					entity.members.append(self.read_element_member(child, owner, omin, omax))
				elif nstag == "xs:group":
					entity.members.append(self.read_group_member(child, EntityKind.Group, "group", omin, omax))
				else:
					self.read_content(child, entity, omin, omax, nstag == "xs:choice")
			elif nstag == "xs:attribute":
				entity.members.append(self.read_attribute_member(child, owner))
			elif nstag == "xs:attributeGroup":
				entity.members.append(self.read_group_member(child, EntityKind.AttributeGroup, "attributeGroup"))
			elif nstag == "xs:simpleContent" or nstag == "xs:complexContent":
				self.read_derivation(child, entity, nstag == "xs:simpleContent")
			elif nstag in FACETS or nstag == "xs:enumeration" or nstag == "xs:simpleType":
				# facets of a simpleContent restriction narrow the value space only
				if entity.derivation is not EntityKind.Restriction:
					self.unsupported(child, owner)
			else:
				self.unsupported(child, owner)

	def read_derivation(self, node: Element, entity: SchemaEntity, simple: bool):
		if node.attrib.get("mixed", "false").lower() == "true":
			entity.mixed = True
		for child in node:
			nstag = self.ns_replace(child.tag)
			if nstag == "xs:extension" or nstag == "xs:restriction":
				entity.simple_content = simple
				if "base" not in child.attrib:
					raise SchemaSyntaxError("{} without base in {}".format(nstag, self.location(entity.qname.local)))
				entity.derivation = EntityKind.Extension if nstag == "xs:extension" else EntityKind.Restriction
				entity.base = self.read_reference(child, "base")
				self.read_content(child, entity)
				return
			if nstag != "xs:annotation":
				self.unsupported(child, entity.qname.local)
		raise SchemaSyntaxError("{} of {} needs an xs:extension or xs:restriction".format(
			self.ns_replace(node.tag), self.location(entity.qname.local)))

	def read_complex_type(self, node: Element, qname: QName) -> SchemaEntity:
		entity = SchemaEntity(EntityKind.ComplexType, qname, self.document.source, "xs:complexType")
		entity.documentation = self.read_documentation(node)
		entity.mixed = node.attrib.get("mixed", "false").lower() == "true"
		self.read_content(node, entity)
		return entity

	def read_simple_type(self, node: Element, qname: QName) -> SchemaEntity:
		entity = SchemaEntity(EntityKind.SimpleType, qname, self.document.source, "xs:simpleType")
		entity.documentation = self.read_documentation(node)
		for child in node:
			nstag = self.ns_replace(child.tag)
			if nstag == "xs:restriction":
				entity.derivation = EntityKind.Restriction
				if "base" in child.attrib:
					entity.base = self.read_reference(child, "base")
				for sub in child:
					sub_tag = self.ns_replace(sub.tag)
					if sub_tag == "xs:enumeration":
						entity.values.append(sub.attrib["value"])
					elif sub_tag == "xs:simpleType" and entity.base is None:
						entity.base = self.hoist(sub, qname.local + ".base")
				if entity.base is None:
					raise SchemaSyntaxError("xs:restriction without base in {}".format(self.location(qname.local)))
				if len(entity.values) > 0:
					entity.kind = EntityKind.Enumeration
				return entity
			elif nstag == "xs:list":
				entity.kind = EntityKind.List
				if "itemType" in child.attrib:
					entity.item_type = self.read_reference(child, "itemType")
				else:
					inner = child.find("{%s}simpleType" % XS_NS)
					if inner is None:
						raise SchemaSyntaxError("xs:list without itemType in {}".format(self.location(qname.local)))
					entity.item_type = self.hoist(inner, qname.local + ".item")
				return entity
			elif nstag == "xs:union":
				self.unsupported(child, qname.local, "union types have no common structural representation")
				# best effort: an opaque simple value
				entity.base = Reference("xs:anySimpleType", "anySimpleType", XS_NS)
				entity.base.builtin = "anySimpleType"
				return entity
		raise SchemaSyntaxError("Unable to find xs:list, xs:union or xs:restriction in xs:simpleType {}".format(self.location(qname.local)))

	def read_directive(self, node: Element, is_import: bool) -> Directive:
		return Directive(
			node.attrib.get("schemaLocation", "").strip(),
			node.attrib.get("namespace", "").strip(),
			is_import,
			self.document.source)

	def parse(self, data: bytes) -> SchemaDocument:
		root = self.read_tree(data)
		if root is None or self.ns_replace(root.tag) != "xs:schema":
			raise SchemaSyntaxError("{} is not an XSD schema".format(self.document.source))

		target_namespace = root.attrib.get("targetNamespace", "")
		if self.include_namespace is not None:
			if target_namespace == "":
				# chameleon include
				target_namespace = self.include_namespace
			elif target_namespace != self.include_namespace:
				raise ResolutionError("{} declares namespace {} but is included into namespace {}".format(
					self.document.source, target_namespace, self.include_namespace or "(absent)"))
		self.document.target_namespace = target_namespace

		for child in root:
			if not isinstance(child.tag, str):
				continue
			xtag = self.ns_replace(child.tag)
			if not xtag.startswith("xs:") or xtag == "xs:annotation":
				continue

			if xtag == "xs:include" or xtag == "xs:import":
				self.document.directives.append(self.read_directive(child, xtag == "xs:import"))
				continue
			if xtag in ("xs:redefine", "xs:override", "xs:notation", "xs:defaultOpenContent"):
				self.unsupported(child, "")
				continue
			if "name" not in child.attrib:
				raise SchemaSyntaxError("top level {} without a name in {}".format(xtag, self.document.source))

			qname = QName(target_namespace, child.attrib["name"])
			if xtag == "xs:complexType":
				entity = self.read_complex_type(child, qname)
			elif xtag == "xs:simpleType":
				entity = self.read_simple_type(child, qname)
			elif xtag == "xs:element":
				entity = SchemaEntity(EntityKind.Element, qname, self.document.source, xtag)
				entity.documentation = self.read_documentation(child)
				entity.type_ref = self.read_declared_type(child, qname.local, "anyType")
				self.check_element_children(child, qname.local)
			elif xtag == "xs:attribute":
				entity = SchemaEntity(EntityKind.Attribute, qname, self.document.source, xtag)
				entity.documentation = self.read_documentation(child)
				entity.type_ref = self.read_declared_type(child, "@" + qname.local, "anySimpleType")
			elif xtag == "xs:group":
				entity = SchemaEntity(EntityKind.Group, qname, self.document.source, xtag)
				self.read_content(child, entity)
			elif xtag == "xs:attributeGroup":
				entity = SchemaEntity(EntityKind.AttributeGroup, qname, self.document.source, xtag)
				self.read_content(child, entity)
			else:
				self.unsupported(child, "")
				continue
			self.document.declarations.append(entity)

		logger.debug("parsed %s: %d declarations, %d directives", self.document.source,
			len(self.document.declarations), len(self.document.directives))
		return self.document
