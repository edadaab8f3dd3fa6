from .errors import ValidationError

# language identifier -> output file extension
LANGUAGES: dict = {
	"Go": ".go",
	"TypeScript": ".ts",
	"C": ".h",
	"Java": ".java",
	"Rust": ".rs",
}


def normalize_lang(lang: str) -> str:
	for known in LANGUAGES:
		if known.lower() == (lang or "").lower():
			return known
	return ""


class ParseOptions:
	file_path: str = ""
	schema: bytes = None
	input_dir: str = ""
	output_dir: str = ""
	lang: str = ""
	package: str = "schema"
	extract: bool = False
	verify: bool = False
	best_effort: bool = False
	warnings: list

	# per invocation bookkeeping, threaded through the recursive parse
	include_map: set
	local_name_ns_map: dict
	ns_schema_location_map: dict
	parse_file_list: list
	parse_file_map: dict
	proto_tree = None

	def __init__(self, file_path: str = "", output_dir: str = "", lang: str = "", input_dir: str = "",
			schema: bytes = None, package: str = "schema", extract: bool = False, verify: bool = False,
			best_effort: bool = False, include_map: set = None, local_name_ns_map: dict = None,
			ns_schema_location_map: dict = None, parse_file_list: list = None, parse_file_map: dict = None):
		self.file_path = file_path
		self.output_dir = output_dir
		self.lang = lang
		self.input_dir = input_dir
		self.schema = schema
		self.package = package
		self.extract = extract
		self.verify = verify
		self.best_effort = best_effort
		self.warnings = []
		self.include_map = set() if include_map is None else include_map
		self.local_name_ns_map = {} if local_name_ns_map is None else local_name_ns_map
		self.ns_schema_location_map = {} if ns_schema_location_map is None else ns_schema_location_map
		self.parse_file_list = [] if parse_file_list is None else parse_file_list
		self.parse_file_map = {} if parse_file_map is None else parse_file_map

	def __repr__(self):
		return "ParseOptions{file_path='" + self.file_path + \
			"', input_dir='" + self.input_dir + \
			"', output_dir='" + self.output_dir + \
			"', lang='" + self.lang + \
			"', extract=" + str(self.extract) + \
			", in_memory=" + str(self.schema is not None) + "}"


def validate_options(options: ParseOptions):
	if not options.file_path:
		raise ValidationError("file path")
	if not options.output_dir:
		raise ValidationError("output directory")
	if options.schema is None and not options.input_dir:
		raise ValidationError("input directory")
	if not options.lang:
		raise ValidationError("language")
	if normalize_lang(options.lang) == "":
		raise ValidationError("language", "unknown language {}, expected one of {}".format(options.lang, ", ".join(LANGUAGES)))
