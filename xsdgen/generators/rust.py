import os
from io import TextIOBase

from ..model import EntityKind, FieldKind, SchemaEntity
from .base import CodeGenerator, enum_identifiers, field_shapes, quote


class RustGenerator(CodeGenerator):
	lang = "Rust"
	extension = ".rs"
	type_map = {
		"string": "String",
		"boolean": "bool",
		"integer": "i64",
		"int8": "i8",
		"int16": "i16",
		"int32": "i32",
		"int64": "i64",
		"uint8": "u8",
		"uint16": "u16",
		"uint32": "u32",
		"uint64": "u64",
		"float32": "f32",
		"float64": "f64",
		"decimal": "f64",
		"date": "String",
		"time": "String",
		"datetime": "String",
		"duration": "String",
		"bytes": "Vec<u8>",
		"any": "String",
	}

	def write_begin(self, out: TextIOBase):
		out.write("// Code generated by xsdgen from {}. DO NOT EDIT.\n\n".format(os.path.basename(self.tree.source)))
		out.write("use serde::{Deserialize, Serialize};\n")

	def write_doc(self, out: TextIOBase, text: str, indent: str = ""):
		if text != "":
			out.write("{}/// {}\n".format(indent, text))

	def serde_name(self, shape) -> str:
		# quick-xml conventions for attributes and character data
		if shape.kind is FieldKind.Text:
			return "$text"
		if shape.kind is FieldKind.Attribute:
			return "@" + shape.name
		return shape.name

	def field_type(self, shape) -> str:
		native = self.native_type(shape.type_ref)
		target = self.tree.lookup(shape.type_ref)
		if shape.collection:
			return "Vec<{}>".format(native)
		if shape.optional:
			if target is not None and target.is_aggregate():
				native = "Box<{}>".format(native)
			return "Option<{}>".format(native)
		return native

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("#[derive(Debug, Clone, PartialEq, Serialize, Deserialize)]\n")
		if entity.kind is EntityKind.Element:
			out.write("#[serde(rename = {})]\n".format(quote(entity.qname.local)))
		out.write("#[allow(non_snake_case)]\n")
		out.write("pub struct {} {{\n".format(self.type_name(entity)))
		for shape in field_shapes(entity):
			serde = "rename = {}".format(quote(self.serde_name(shape)))
			if shape.collection:
				serde += ", default"
			elif shape.optional:
				serde += ", default, skip_serializing_if = \"Option::is_none\""
			self.write_doc(out, shape.documentation, "\t")
			out.write("\t#[serde({})]\n".format(serde))
			out.write("\tpub {}: {},\n".format(shape.ident, self.field_type(shape)))
		out.write("}\n")

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("pub type {} = {};\n".format(self.type_name(entity), self.base_native_type(entity)))

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("#[derive(Debug, Clone, Copy, PartialEq, Eq, Hash, Serialize, Deserialize)]\n")
		out.write("pub enum {} {{\n".format(self.type_name(entity)))
		for ident, value in zip(enum_identifiers(entity.values), entity.values):
			out.write("\t#[serde(rename = {})]\n".format(quote(value)))
			out.write("\t{},\n".format(ident))
		out.write("}\n")

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("pub type {} = Vec<{}>;\n".format(self.type_name(entity), self.native_type(entity.item_type)))
