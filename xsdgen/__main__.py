import argparse
import logging
import os
import sys

from .errors import XsdGenException
from .files import get_file_list, prepare_output_dir
from .options import LANGUAGES, ParseOptions
from .parser import parse


def main(argv: list = None) -> int:
	parser = argparse.ArgumentParser(prog="xsdgen", description="Generate type declarations from XSD files")
	parser.add_argument("-i", "--input", required=True, help="An XSD file, or a directory that is searched for XSD files")
	parser.add_argument("-o", "--output", required=True, help="The directory the generated code is written to")
	parser.add_argument("-l", "--lang", default="Go", help="The target language, one of " + ", ".join(LANGUAGES))
	parser.add_argument("-p", "--package", default="schema", help="The package name used by Go and Java code")
	parser.add_argument("--extract", action="store_true", help="Only parse and check the schemas, do not generate code")
	parser.add_argument("--verify", action="store_true", help="Compile every schema with lxml before parsing it")
	parser.add_argument("--best-effort", action="store_true", help="Skip unsupported constructs instead of failing")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log every file parsed and written")
	res = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if res.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

	input_dir = res.input if os.path.isdir(res.input) else os.path.dirname(os.path.abspath(res.input))
	try:
		files = [f for f in get_file_list(res.input) if os.path.splitext(f)[1] == ".xsd"]
		prepare_output_dir(res.output)
	except OSError as exc:
		print("xsdgen:", exc, file=sys.stderr)
		return 1

	for file in files:
		options = ParseOptions(
			file_path=file,
			input_dir=input_dir,
			output_dir=res.output,
			lang=res.lang,
			package=res.package,
			extract=res.extract,
			verify=res.verify,
			best_effort=res.best_effort)
		try:
			parse(options)
		except XsdGenException as exc:
			print("xsdgen: {}: {}".format(file, exc), file=sys.stderr)
			return 1
		for warning in options.warnings:
			print("xsdgen: warning: {}".format(warning), file=sys.stderr)
	return 0


if __name__ == "__main__":
	sys.exit(main())
