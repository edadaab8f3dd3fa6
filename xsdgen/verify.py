import logging

from lxml import etree

from .errors import SchemaIOError, SchemaSyntaxError

logger = logging.getLogger(__name__)


def verify_schema(xsd_path: str, data: bytes = None):
	# if the schema does not compile with libxml2, there is no point in walking it
	parser = etree.XMLParser(resolve_entities=False, no_network=True)
	try:
		if data is None:
			xsd_doc = etree.parse(xsd_path, parser)
		else:
			xsd_doc = etree.fromstring(data, parser, base_url=xsd_path).getroottree()
		etree.XMLSchema(xsd_doc)
	except etree.XMLSyntaxError as exc:
		raise SchemaSyntaxError("{} is not well-formed XML: {}".format(xsd_path, exc)) from exc
	except etree.XMLSchemaParseError as exc:
		raise SchemaSyntaxError("{} is not a valid XML schema: {}".format(xsd_path, exc)) from exc
	except OSError as exc:
		raise SchemaIOError(xsd_path, exc) from exc
	logger.debug("verified %s", xsd_path)
