import os

import pytest

from xsdgen.options import ParseOptions

XS_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'


def schema(body: str, attrs: str = "") -> str:
	return XS_HEADER + '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"{}>\n{}\n</xs:schema>\n'.format(
		" " + attrs if attrs else "", body)


@pytest.fixture
def xsd_dir(tmp_path):
	path = tmp_path / "xsd"
	path.mkdir()
	return path


@pytest.fixture
def write_xsd(xsd_dir):
	def write(name: str, body: str, attrs: str = "") -> str:
		path = xsd_dir / name
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(schema(body, attrs), encoding="utf-8")
		return str(path)
	return write


@pytest.fixture
def make_options(xsd_dir, tmp_path):
	def make(file_path: str, lang: str = "Go", **kwargs) -> ParseOptions:
		return ParseOptions(
			file_path=file_path,
			input_dir=str(xsd_dir),
			output_dir=str(tmp_path / "out"),
			lang=lang,
			**kwargs)
	return make


def output_files(tmp_path) -> list:
	out = tmp_path / "out"
	if not out.exists():
		return []
	return sorted(os.path.relpath(os.path.join(root, name), str(out)) for root, _, names in os.walk(str(out)) for name in names)
