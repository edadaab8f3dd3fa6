import logging
import os
import urllib.request
from urllib.parse import urljoin

from .errors import ResolutionError, SchemaIOError
from .model import Directive, XML_NS
from .options import ParseOptions

logger = logging.getLogger(__name__)


def is_remote(location: str) -> bool:
	return location.startswith("http://") or location.startswith("https://")


def document_base(path: str) -> str:
	if is_remote(path):
		return path
	return os.path.dirname(os.path.abspath(path))


class NamespaceResolver:
	"""Turns include/import directives into schema locations.

	The resolver owns the include map and the namespace -> location map of
	one parse invocation. Every physical file is handed out for parsing at
	most once, which is what makes circular includes terminate.
	"""

	options: ParseOptions
	deferred: list

	def __init__(self, options: ParseOptions):
		self.options = options
		self.deferred = []

	def claim(self, location: str) -> bool:
		if location in self.options.include_map:
			return False
		self.options.include_map.add(location)
		return True

	def register_namespace(self, namespace: str, location: str):
		if namespace not in self.options.ns_schema_location_map:
			self.options.ns_schema_location_map[namespace] = location

	def resolve(self, directive: Directive, base: str) -> str:
		if directive.is_import and directive.namespace == XML_NS:
			# the xml namespace is built in
			return None
		if directive.location == "":
			if not directive.is_import:
				raise ResolutionError("xs:include without schemaLocation in {}".format(directive.source))
			known = self.options.ns_schema_location_map.get(directive.namespace)
			if known is None:
				self.deferred.append(directive)
			return known

		if is_remote(directive.location):
			location = directive.location
		elif is_remote(base):
			location = urljoin(base, directive.location)
		else:
			location = self.find_local(directive, base)
		if directive.is_import:
			self.register_namespace(directive.namespace, location)
		return location

	def find_local(self, directive: Directive, base: str) -> str:
		candidates = [os.path.join(base, directive.location)]
		if self.options.input_dir:
			candidates.append(os.path.join(self.options.input_dir, directive.location))
		for candidate in candidates:
			if os.path.isfile(candidate):
				return os.path.normpath(os.path.abspath(candidate))

		# an import may point at a namespace that some other file already provided
		if directive.is_import and directive.namespace in self.options.ns_schema_location_map:
			return self.options.ns_schema_location_map[directive.namespace]
		raise ResolutionError("Unable to resolve {} of {} referenced from {} (searched {})".format(
			"xs:import" if directive.is_import else "xs:include",
			directive.location,
			directive.source,
			", ".join(candidates)))

	def check_deferred(self):
		for directive in self.deferred:
			if directive.namespace not in self.options.ns_schema_location_map:
				raise ResolutionError("xs:import of namespace {} in {} has no schemaLocation and no parsed schema provides it".format(
					directive.namespace or "(absent)", directive.source))
		self.deferred = []

	def read(self, location: str) -> bytes:
		try:
			if is_remote(location):
				logger.debug("fetching %s", location)
				with urllib.request.urlopen(location) as response:
					return response.read()
			with open(location, "rb") as stream:
				return stream.read()
		except OSError as exc:
			raise SchemaIOError(location, exc) from exc
