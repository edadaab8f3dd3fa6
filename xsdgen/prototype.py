import logging
from types import MappingProxyType

from .document import multiply_occurs
from .errors import CyclicTypeError, DuplicateDefinitionError, UnresolvedReferenceError
from .model import ANONYMOUS_SPACE, UNBOUNDED, XS_NS, EntityKind, Field, FieldKind, QName, Reference, SchemaEntity
from .options import ParseOptions

logger = logging.getLogger(__name__)

TEXT_FIELD = "Value"

# entities that are only ever consumed through references
REFERENCE_ONLY: tuple = (EntityKind.Attribute, EntityKind.Group, EntityKind.AttributeGroup)


def builtin_reference(local: str) -> Reference:
	ref = Reference("xs:" + local, local, XS_NS)
	ref.builtin = local
	return ref


class PrototypeTree:
	"""The resolved entities of one root schema file.

	``entities`` is the arena of every declaration reachable from the root's
	include/import closure, keyed by ``(symbol space, QName)``; iterating the
	tree yields only the root file's emitted declarations, in document order.
	"""

	source: str = ""
	target_namespace: str = ""

	def __init__(self, source: str, target_namespace: str, entities: dict, order: list):
		self.source = source
		self.target_namespace = target_namespace
		self.entities = MappingProxyType(entities)
		self.order = tuple(order)

	def __iter__(self):
		for key in self.order:
			yield self.entities[key]

	def __len__(self):
		return len(self.order)

	def __repr__(self):
		return "PrototypeTree{" + self.source + ": " + ", ".join(map(str, self)) + "}"

	def lookup(self, ref: Reference) -> SchemaEntity:
		if ref is None or ref.target is None:
			return None
		return self.entities[ref.target]

	def find(self, local: str, kind: EntityKind = None) -> SchemaEntity:
		for entity in self.entities.values():
			if entity.qname.local == local and (kind is None or entity.kind is kind):
				return entity
		return None


class PrototypeTreeBuilder:
	options: ParseOptions
	arena: dict

	def __init__(self, options: ParseOptions):
		self.options = options
		self.arena = {}

	def build(self, source: str, target_namespace: str) -> PrototypeTree:
		self.merge()
		self.resolve()
		self.check_cycles()
		self.flatten()
		return PrototypeTree(source, target_namespace, self.arena, self.emission_order(source))

	def merge(self):
		for source in self.options.parse_file_list:
			for entity in self.options.parse_file_map.get(source, []):
				key = entity.key()
				if key in self.arena:
					other = self.arena[key]
					raise DuplicateDefinitionError("{} {} is defined in both {} and {}".format(
						entity.node_kind, entity.qname, other.source, entity.source))
				self.arena[key] = entity

	def candidate_namespaces(self, ref: Reference, owner_namespace: str) -> list:
		if ref.namespace is not None:
			return [ref.namespace]
		candidates = [owner_namespace]
		mapped = self.options.local_name_ns_map.get(ref.local)
		if mapped is not None and mapped not in candidates:
			candidates.append(mapped)
		if "" not in candidates:
			candidates.append("")
		return candidates

	def resolve_reference(self, ref: Reference, owner: SchemaEntity):
		if ref is None or ref.is_resolved():
			return
		for namespace in self.candidate_namespaces(ref, owner.qname.namespace):
			key = (ref.space, QName(namespace, ref.local))
			if key in self.arena:
				ref.target = key
				return
		raise UnresolvedReferenceError("{} reference {} in {} {} ({}) has no definition".format(
			ref.space, ref.raw, owner.node_kind, owner.qname, owner.source))

	def resolve(self):
		for entity in self.arena.values():
			for ref in (entity.base, entity.item_type, entity.type_ref):
				self.resolve_reference(ref, entity)
			for member in entity.members:
				self.resolve_reference(member.type_ref, entity)
				self.resolve_reference(member.ref, entity)

	def check_cycles(self):
		# derivation chains
		for key, entity in self.arena.items():
			chain = [key]
			current = entity
			while current.base is not None and current.base.target is not None:
				if current.base.target in chain:
					names = [str(k[1]) for k in chain] + [str(current.base.target[1])]
					raise CyclicTypeError("Cyclic type derivation: {}".format(" -> ".join(names)))
				chain.append(current.base.target)
				current = self.arena[current.base.target]

		# group references
		for key, entity in self.arena.items():
			if entity.kind in (EntityKind.Group, EntityKind.AttributeGroup):
				self.check_group_cycle(entity, [key])

	def check_group_cycle(self, entity: SchemaEntity, path: list):
		for member in entity.members:
			if member.kind not in (EntityKind.Group, EntityKind.AttributeGroup):
				continue
			target = member.ref.target
			if target in path:
				names = [str(k[1]) for k in path] + [str(target[1])]
				raise CyclicTypeError("Cyclic group reference: {}".format(" -> ".join(names)))
			self.check_group_cycle(self.arena[target], path + [target])

	def flatten(self):
		for entity in self.arena.values():
			if entity.kind is EntityKind.ComplexType:
				self.fields_of(entity)
		for entity in self.arena.values():
			if entity.kind is EntityKind.Element:
				target = self.target_of(entity.type_ref)
				if target is not None and target.kind is EntityKind.ComplexType:
					entity.fields = self.fields_of(target)

	def target_of(self, ref: Reference) -> SchemaEntity:
		if ref is None or ref.target is None:
			return None
		return self.arena[ref.target]

	def fields_of(self, entity: SchemaEntity) -> list:
		if entity.fields is not None:
			return entity.fields

		inherited = []
		base = self.target_of(entity.base)
		if base is not None and base.kind is EntityKind.ComplexType:
			inherited = self.fields_of(base)
		elif entity.simple_content and entity.base is not None:
			inherited = [Field(TEXT_FIELD, FieldKind.Text, entity.base)]

		prohibited = set()
		own = self.expand(entity.members, prohibited=prohibited)
		if entity.derivation is EntityKind.Restriction:
			fields = self.restrict(inherited, own, prohibited, entity.simple_content)
		else:
			fields = list(inherited) + own

		if entity.mixed and not any(field.kind is FieldKind.Text for field in fields):
			fields.append(Field(TEXT_FIELD, FieldKind.Text, builtin_reference("string"), optional=True))

		entity.fields = fields
		return fields

	def restrict(self, inherited: list, own: list, prohibited: set, simple_content: bool) -> list:
		if simple_content:
			content = [field for field in inherited if field.kind is not FieldKind.Attribute]
		else:
			# a restricted content model replaces the base one
			content = [field for field in own if field.kind is not FieldKind.Attribute]
			if len(content) == 0:
				content = [field for field in inherited if field.kind is not FieldKind.Attribute]

		# attribute uses are inherited unless redeclared or prohibited
		redeclared = dict((field.name, field) for field in own if field.kind is FieldKind.Attribute)
		attributes = []
		for field in inherited:
			if field.kind is not FieldKind.Attribute or field.name in prohibited:
				continue
			attributes.append(redeclared.pop(field.name, field))
		return content + attributes + list(redeclared.values())

	def expand(self, members: list, min_factor: int = 1, max_factor: int = 1, prohibited: set = None) -> list:
		fields = []
		for member in members:
			if member.kind in (EntityKind.Group, EntityKind.AttributeGroup):
				group = self.arena[member.ref.target]
				fields += self.expand(group.members,
					multiply_occurs(member.min_occurs, min_factor),
					multiply_occurs(member.max_occurs, max_factor),
					prohibited)
				continue
			if member.prohibited:
				if prohibited is not None:
					prohibited.add(member.name)
				continue

			type_ref = member.type_ref
			if member.ref is not None:
				type_ref = self.arena[member.ref.target].type_ref

			if member.kind is EntityKind.Attribute:
				field = Field(member.name, FieldKind.Attribute, type_ref, optional=member.min_occurs == 0)
			else:
				min_occurs = multiply_occurs(member.min_occurs, min_factor)
				max_occurs = multiply_occurs(member.max_occurs, max_factor)
				if max_occurs == 0:
					continue
				field = Field(member.name, FieldKind.Element, type_ref,
					optional=min_occurs == 0,
					collection=max_occurs == UNBOUNDED or max_occurs > 1)
			field.documentation = member.documentation
			fields.append(field)
		return fields

	def emission_order(self, source: str) -> list:
		declarations = self.options.parse_file_map.get(source, [])
		covered = set()
		for entity in declarations:
			if entity.kind is EntityKind.Element and entity.type_ref is not None and entity.type_ref.space == ANONYMOUS_SPACE:
				# the element and its inline type share one name, emit only one of them
				if entity.fields is not None:
					covered.add(entity.type_ref.target)
				else:
					covered.add(entity.key())

		order = []
		for entity in declarations:
			key = entity.key()
			if entity.kind in REFERENCE_ONLY or key in covered:
				continue
			order.append(key)
		logger.debug("prototype tree of %s: %d entities to emit, %d known", source, len(order), len(self.arena))
		return order
