import os

import pytest

from xsdgen import (
	CyclicTypeError,
	DuplicateDefinitionError,
	EntityKind,
	ParseOptions,
	ResolutionError,
	SchemaIOError,
	SchemaSyntaxError,
	UnresolvedReferenceError,
	UnsupportedConstructError,
	parse,
)
from xsdgen.model import QName

from .conftest import output_files, schema

A_TYPE = """
	<xs:complexType name="A">
		<xs:sequence><xs:element name="b" type="B" minOccurs="0"/></xs:sequence>
	</xs:complexType>
"""
B_TYPE = """
	<xs:complexType name="B">
		<xs:sequence><xs:element name="a" type="A" minOccurs="0"/></xs:sequence>
	</xs:complexType>
"""


def shapes(tree) -> dict:
	return dict((str(key), repr(entity.fields)) for key, entity in tree.entities.items())


def test_include_cycle_terminates(write_xsd, make_options, xsd_dir):
	root = write_xsd("a.xsd", '<xs:include schemaLocation="b.xsd"/>' + A_TYPE)
	write_xsd("b.xsd", '<xs:include schemaLocation="a.xsd"/>' + B_TYPE)
	options = make_options(root, extract=True)
	tree = parse(options)
	assert len(options.parse_file_list) == 2
	assert [e.qname.local for e in tree] == ["A"]

	# same result as when b.xsd does not include a.xsd back
	single_root = write_xsd("single/a.xsd", '<xs:include schemaLocation="b.xsd"/>' + A_TYPE)
	write_xsd("single/b.xsd", B_TYPE)
	single = parse(make_options(single_root, extract=True))
	assert shapes(single) == shapes(tree)


def test_duplicate_definition_across_files(write_xsd, make_options):
	root = write_xsd("a.xsd", '<xs:include schemaLocation="b.xsd"/><xs:complexType name="Dup"/>')
	write_xsd("b.xsd", '<xs:complexType name="Dup"/>')
	with pytest.raises(DuplicateDefinitionError) as exc:
		parse(make_options(root, extract=True))
	assert "a.xsd" in str(exc.value)
	assert "b.xsd" in str(exc.value)


def test_same_name_in_different_symbol_spaces(write_xsd, make_options):
	root = write_xsd("a.xsd", """
		<xs:complexType name="item"><xs:sequence><xs:element name="id" type="xs:string"/></xs:sequence></xs:complexType>
		<xs:element name="item" type="item"/>
	""")
	tree = parse(make_options(root, extract=True))
	assert [(e.kind, e.qname.local) for e in tree] == [(EntityKind.ComplexType, "item"), (EntityKind.Element, "item")]


def test_unresolved_reference(write_xsd, make_options, tmp_path):
	root = write_xsd("a.xsd", '<xs:element name="a" type="Missing"/>')
	with pytest.raises(UnresolvedReferenceError) as exc:
		parse(make_options(root))
	assert "Missing" in str(exc.value)
	assert output_files(tmp_path) == []


def test_cyclic_extension(write_xsd, make_options):
	root = write_xsd("a.xsd", """
		<xs:complexType name="A"><xs:complexContent><xs:extension base="B"/></xs:complexContent></xs:complexType>
		<xs:complexType name="B"><xs:complexContent><xs:extension base="A"/></xs:complexContent></xs:complexType>
	""")
	with pytest.raises(CyclicTypeError):
		parse(make_options(root, extract=True))


def test_cyclic_group(write_xsd, make_options):
	root = write_xsd("a.xsd", """
		<xs:group name="G1"><xs:sequence><xs:group ref="G2"/></xs:sequence></xs:group>
		<xs:group name="G2"><xs:sequence><xs:group ref="G1"/></xs:sequence></xs:group>
	""")
	with pytest.raises(CyclicTypeError):
		parse(make_options(root, extract=True))


def test_recursive_types_are_allowed(write_xsd, make_options):
	root = write_xsd("a.xsd", """
		<xs:complexType name="Node">
			<xs:sequence><xs:element name="child" type="Node" minOccurs="0" maxOccurs="unbounded"/></xs:sequence>
		</xs:complexType>
	""")
	tree = parse(make_options(root, extract=True))
	field = tree.find("Node").fields[0]
	assert field.collection
	assert tree.lookup(field.type_ref) is tree.find("Node")


def test_import_across_namespaces(write_xsd, make_options, tmp_path):
	root = write_xsd("main.xsd", """
		<xs:import namespace="urn:types" schemaLocation="types/types.xsd"/>
		<xs:element name="order" type="Order"/>
		<xs:complexType name="Order">
			<xs:sequence>
				<xs:element name="status" type="t:Status"/>
				<xs:element name="line" type="t:Line" maxOccurs="unbounded"/>
			</xs:sequence>
		</xs:complexType>
	""", 'targetNamespace="urn:main" xmlns="urn:main" xmlns:t="urn:types"')
	write_xsd("types/types.xsd", """
		<xs:simpleType name="Status">
			<xs:restriction base="xs:string">
				<xs:enumeration value="new"/>
				<xs:enumeration value="shipped"/>
			</xs:restriction>
		</xs:simpleType>
		<xs:complexType name="Line">
			<xs:sequence>
				<xs:element name="sku" type="xs:string"/>
				<xs:element name="qty" type="xs:int"/>
			</xs:sequence>
		</xs:complexType>
	""", 'targetNamespace="urn:types"')
	options = make_options(root)
	tree = parse(options)

	assert options.ns_schema_location_map["urn:types"].endswith(os.path.join("types", "types.xsd"))
	assert options.local_name_ns_map["Line"] == "urn:types"
	assert [str(e.qname) for e in tree] == ["{urn:main}order", "{urn:main}Order"]
	status = tree.lookup(tree.find("Order").fields[0].type_ref)
	assert status.kind is EntityKind.Enumeration
	assert status.qname == QName("urn:types", "Status")

	assert output_files(tmp_path) == ["main.xsd.go"]
	code = (tmp_path / "out" / "main.xsd.go").read_text(encoding="utf-8")
	assert "type OrderElement struct {\n\tXMLName xml.Name `xml:\"order\"`\n" in code
	assert "\tStatus Status `xml:\"status\"`\n" in code
	assert "\tLine []Line `xml:\"line\"`\n" in code
	assert "type Line struct" not in code


def test_import_namespace_mismatch(write_xsd, make_options):
	root = write_xsd("main.xsd", '<xs:import namespace="urn:expected" schemaLocation="other.xsd"/>')
	write_xsd("other.xsd", '<xs:complexType name="T"/>', 'targetNamespace="urn:actual"')
	with pytest.raises(ResolutionError):
		parse(make_options(root, extract=True))


def test_include_namespace_mismatch(write_xsd, make_options):
	root = write_xsd("main.xsd", '<xs:include schemaLocation="other.xsd"/>', 'targetNamespace="urn:main"')
	write_xsd("other.xsd", '<xs:complexType name="T"/>', 'targetNamespace="urn:other"')
	with pytest.raises(ResolutionError):
		parse(make_options(root, extract=True))


def test_chameleon_include(write_xsd, make_options):
	root = write_xsd("main.xsd", """
		<xs:include schemaLocation="shared.xsd"/>
		<xs:complexType name="Doc"><xs:sequence><xs:element name="s" type="Shared"/></xs:sequence></xs:complexType>
	""", 'targetNamespace="urn:main" xmlns="urn:main"')
	write_xsd("shared.xsd", '<xs:simpleType name="Shared"><xs:restriction base="xs:token"/></xs:simpleType>')
	tree = parse(make_options(root, extract=True))
	shared = tree.lookup(tree.find("Doc").fields[0].type_ref)
	assert shared.qname == QName("urn:main", "Shared")


def test_missing_include(write_xsd, make_options):
	root = write_xsd("main.xsd", '<xs:include schemaLocation="nowhere.xsd"/>')
	with pytest.raises(ResolutionError) as exc:
		parse(make_options(root, extract=True))
	assert "nowhere.xsd" in str(exc.value)


def test_include_found_in_input_dir(write_xsd, make_options):
	root = write_xsd("nested/main.xsd", """
		<xs:include schemaLocation="common.xsd"/>
		<xs:element name="c" type="Common"/>
	""")
	write_xsd("common.xsd", '<xs:simpleType name="Common"><xs:restriction base="xs:string"/></xs:simpleType>')
	tree = parse(make_options(root, extract=True))
	assert [e.qname.local for e in tree] == ["c"]


def test_location_less_import_is_deferred(write_xsd, make_options):
	root = write_xsd("main.xsd", """
		<xs:import namespace="urn:types"/>
		<xs:import namespace="urn:types" schemaLocation="types.xsd"/>
		<xs:element name="v" type="t:V"/>
	""", 'xmlns:t="urn:types"')
	write_xsd("types.xsd", '<xs:simpleType name="V"><xs:restriction base="xs:int"/></xs:simpleType>', 'targetNamespace="urn:types"')
	tree = parse(make_options(root, extract=True))
	assert len(tree) == 1


def test_location_less_import_unresolvable(write_xsd, make_options):
	root = write_xsd("main.xsd", '<xs:import namespace="urn:nowhere"/>')
	with pytest.raises(ResolutionError) as exc:
		parse(make_options(root, extract=True))
	assert "urn:nowhere" in str(exc.value)


def test_xml_namespace_import(write_xsd, make_options):
	root = write_xsd("main.xsd", """
		<xs:import namespace="http://www.w3.org/XML/1998/namespace"/>
		<xs:complexType name="Text">
			<xs:simpleContent>
				<xs:extension base="xs:string"><xs:attribute ref="xml:lang"/></xs:extension>
			</xs:simpleContent>
		</xs:complexType>
	""")
	tree = parse(make_options(root, extract=True))
	assert repr(tree.find("Text").fields) == "[Value: xs:string, lang?: xs:string]"


def test_missing_root_file(make_options, xsd_dir):
	with pytest.raises(SchemaIOError) as exc:
		parse(make_options(str(xsd_dir / "missing.xsd")))
	assert exc.value.path.endswith("missing.xsd")


def test_output_path_mirrors_input_dir(write_xsd, make_options, tmp_path):
	root = write_xsd("sub/dir/x.xsd", '<xs:complexType name="T"/>')
	parse(make_options(root, lang="TypeScript"))
	assert output_files(tmp_path) == [os.path.join("sub", "dir", "x.xsd.ts")]


@pytest.mark.parametrize("lang,extension", [("Go", ".go"), ("TypeScript", ".ts"), ("C", ".h"), ("Java", ".java"), ("Rust", ".rs")])
def test_output_extension(write_xsd, make_options, tmp_path, lang, extension):
	root = write_xsd("x.xsd", '<xs:complexType name="T"/>')
	parse(make_options(root, lang=lang))
	assert output_files(tmp_path) == ["x.xsd" + extension]


def test_extract_writes_nothing(write_xsd, make_options, tmp_path):
	root = write_xsd("x.xsd", '<xs:complexType name="T"/>')
	options = make_options(root, extract=True)
	tree = parse(options)
	assert options.proto_tree is tree
	assert output_files(tmp_path) == []


def test_in_memory_schema(tmp_path):
	options = ParseOptions(
		file_path=str(tmp_path / "memory.xsd"),
		output_dir=str(tmp_path / "out"),
		lang="Rust",
		schema=schema('<xs:simpleType name="Id"><xs:restriction base="xs:long"/></xs:simpleType>').encode("utf-8"))
	parse(options)
	code = (tmp_path / "out" / "memory.xsd.rs").read_text(encoding="utf-8")
	assert "pub type Id = i64;\n" in code


def test_unsupported_construct_writes_nothing(write_xsd, make_options, tmp_path):
	root = write_xsd("x.xsd", '<xs:complexType name="T"><xs:sequence><xs:any/></xs:sequence></xs:complexType>')
	with pytest.raises(UnsupportedConstructError):
		parse(make_options(root))
	assert output_files(tmp_path) == []


def test_best_effort_generates_with_warnings(write_xsd, make_options, tmp_path):
	root = write_xsd("x.xsd", """
		<xs:complexType name="T">
			<xs:sequence><xs:element name="a" type="xs:string"/><xs:any/></xs:sequence>
		</xs:complexType>
	""")
	options = make_options(root, best_effort=True)
	parse(options)
	assert len(options.warnings) == 1
	assert output_files(tmp_path) == ["x.xsd.go"]


def test_verify_rejects_invalid_schema(write_xsd, make_options, tmp_path):
	root = write_xsd("x.xsd", '<xs:complexType name="T"><xs:sequence><xs:element name="a" type="xs:notAType"/></xs:sequence></xs:complexType>')
	with pytest.raises(SchemaSyntaxError):
		parse(make_options(root, verify=True))
	assert output_files(tmp_path) == []


def test_verify_accepts_valid_schema(write_xsd, make_options):
	root = write_xsd("x.xsd", '<xs:complexType name="T"><xs:sequence><xs:element name="a" type="xs:string"/></xs:sequence></xs:complexType>')
	tree = parse(make_options(root, verify=True, extract=True))
	assert len(tree) == 1


def test_inline_types_of_different_files_do_not_clash(write_xsd, make_options):
	root = write_xsd("a.xsd", """
		<xs:include schemaLocation="b.xsd"/>
		<xs:element name="X">
			<xs:complexType>
				<xs:sequence>
					<xs:element name="y"><xs:simpleType><xs:restriction base="xs:string"/></xs:simpleType></xs:element>
				</xs:sequence>
			</xs:complexType>
		</xs:element>
	""")
	write_xsd("b.xsd", """
		<xs:complexType name="X">
			<xs:sequence>
				<xs:element name="y"><xs:simpleType><xs:restriction base="xs:int"/></xs:simpleType></xs:element>
			</xs:sequence>
		</xs:complexType>
	""")
	tree = parse(make_options(root, extract=True))
	inline = [e for e in tree.entities.values() if e.anonymous and e.qname.local == "X.y"]
	assert len(inline) == 2
	assert sorted(os.path.basename(e.source) for e in inline) == ["a.xsd", "b.xsd"]
	# each field points at the inline type of its own file
	element = tree.find("X", EntityKind.Element)
	complex_type = tree.find("X", EntityKind.ComplexType)
	assert tree.lookup(tree.lookup(element.type_ref).fields[0].type_ref).base.builtin == "string"
	assert tree.lookup(complex_type.fields[0].type_ref).base.builtin == "int"


def test_same_local_name_in_two_namespaces(write_xsd, make_options, tmp_path):
	root = write_xsd("shipping.xsd", """
		<xs:import namespace="urn:acme:billing" schemaLocation="billing.xsd"/>
		<xs:complexType name="Address">
			<xs:sequence><xs:element name="city" type="xs:string"/></xs:sequence>
		</xs:complexType>
		<xs:complexType name="Order">
			<xs:sequence>
				<xs:element name="ship" type="Address"/>
				<xs:element name="bill" type="b:Address"/>
			</xs:sequence>
		</xs:complexType>
	""", 'targetNamespace="urn:acme:shipping" xmlns="urn:acme:shipping" xmlns:b="urn:acme:billing"')
	write_xsd("billing.xsd", """
		<xs:complexType name="Address">
			<xs:sequence><xs:element name="street" type="xs:string"/></xs:sequence>
		</xs:complexType>
	""", 'targetNamespace="urn:acme:billing"')
	parse(make_options(root))
	code = (tmp_path / "out" / "shipping.xsd.go").read_text(encoding="utf-8")
	assert "\tShip Address `xml:\"ship\"`\n" in code
	assert "\tBill BillingAddress `xml:\"bill\"`\n" in code
	assert "type Address struct {\n\tCity string `xml:\"city\"`\n" in code


def test_in_memory_schema_includes_from_input_dir(write_xsd, xsd_dir, tmp_path):
	write_xsd("common.xsd", '<xs:simpleType name="Common"><xs:restriction base="xs:string"/></xs:simpleType>')
	options = ParseOptions(
		file_path=str(tmp_path / "memory.xsd"),
		input_dir=str(xsd_dir),
		output_dir=str(tmp_path / "out"),
		lang="Go",
		schema=schema("""
			<xs:include schemaLocation="common.xsd"/>
			<xs:element name="c" type="Common"/>
		""").encode("utf-8"))
	tree = parse(options)
	common = tree.lookup(tree.find("c").type_ref)
	assert common.qname.local == "Common"
	assert os.path.basename(common.source) == "common.xsd"
	assert "type C Common\n" in (tmp_path / "out" / "memory.xsd.go").read_text(encoding="utf-8")
