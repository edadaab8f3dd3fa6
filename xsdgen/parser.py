import logging
import os

from .document import DocumentParser
from .errors import ResolutionError, SchemaIOError
from .generators import get_generator
from .options import ParseOptions, validate_options
from .prototype import PrototypeTree, PrototypeTreeBuilder
from .resolver import NamespaceResolver, document_base, is_remote
from .verify import verify_schema

logger = logging.getLogger(__name__)


class Parser:
	"""Drives one parse of a root schema and its include/import closure.

	All state lives in the ``ParseOptions`` given to the constructor, so a
	``Parser`` must not share its options with another parse running at the
	same time.
	"""

	options: ParseOptions
	resolver: NamespaceResolver

	def __init__(self, options: ParseOptions):
		self.options = options
		self.resolver = NamespaceResolver(options)

	def root_location(self) -> str:
		if is_remote(self.options.file_path):
			return self.options.file_path
		return os.path.normpath(os.path.abspath(self.options.file_path))

	def output_path(self) -> str:
		file_path = self.options.file_path
		relative = os.path.basename(file_path)
		if self.options.input_dir and not is_remote(file_path):
			relative = os.path.relpath(os.path.abspath(file_path), os.path.abspath(self.options.input_dir))
			if relative.startswith(os.pardir):
				relative = os.path.basename(file_path)
		return os.path.join(self.options.output_dir, relative)

	def parse_file(self, location: str, data: bytes = None, include_namespace: str = None, import_namespace: str = None) -> str:
		if not self.resolver.claim(location):
			logger.debug("%s already parsed", location)
			return None
		if data is None:
			data = self.resolver.read(location)

		logger.debug("parsing %s", location)
		document = DocumentParser(self.options, location, include_namespace).parse(data)
		if import_namespace is not None and document.target_namespace != import_namespace:
			raise ResolutionError("{} declares namespace {} but was imported for namespace {}".format(
				location, document.target_namespace or "(absent)", import_namespace or "(absent)"))

		self.options.parse_file_list.append(location)
		self.options.parse_file_map[location] = document.declarations
		self.resolver.register_namespace(document.target_namespace, location)
		for entity in document.declarations:
			if not entity.anonymous and entity.qname.local not in self.options.local_name_ns_map:
				self.options.local_name_ns_map[entity.qname.local] = entity.qname.namespace

		base = document_base(location)
		for directive in document.directives:
			target = self.resolver.resolve(directive, base)
			if target is None:
				continue
			logger.debug("following %s -> %s", directive, target)
			if directive.is_import:
				self.parse_file(target, import_namespace=directive.namespace)
			else:
				self.parse_file(target, include_namespace=document.target_namespace)
		return document.target_namespace

	def parse(self) -> PrototypeTree:
		validate_options(self.options)
		root = self.root_location()
		if self.options.verify:
			verify_schema(root, self.options.schema)

		target_namespace = self.parse_file(root, self.options.schema)
		self.resolver.check_deferred()
		tree = PrototypeTreeBuilder(self.options).build(root, target_namespace)
		self.options.proto_tree = tree
		if self.options.extract:
			return tree

		generator = get_generator(self.options.lang, self.output_path())
		text = generator.generate(tree, self.options)
		self.write(generator.file_with_extension(), text)
		return tree

	def write(self, path: str, text: str):
		try:
			directory = os.path.dirname(path)
			if directory != "":
				os.makedirs(directory, exist_ok=True)
			with open(path, "w", encoding="utf-8") as out:
				out.write(text)
		except OSError as exc:
			raise SchemaIOError(path, exc) from exc
		logger.info("generated %s", path)


def parse(options: ParseOptions) -> PrototypeTree:
	return Parser(options).parse()
