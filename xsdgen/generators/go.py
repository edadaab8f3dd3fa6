import os
from io import TextIOBase

from ..model import EntityKind, FieldKind, SchemaEntity
from .base import CodeGenerator, enum_identifiers, field_shapes, quote


class GoGenerator(CodeGenerator):
	lang = "Go"
	extension = ".go"
	type_map = {
		"string": "string",
		"boolean": "bool",
		"integer": "int",
		"int8": "int8",
		"int16": "int16",
		"int32": "int32",
		"int64": "int64",
		"uint8": "uint8",
		"uint16": "uint16",
		"uint32": "uint32",
		"uint64": "uint64",
		"float32": "float32",
		"float64": "float64",
		"decimal": "float64",
		"date": "string",
		"time": "string",
		"datetime": "string",
		"duration": "string",
		"bytes": "[]byte",
		# character data is kept verbatim
		"any": "string",
	}

	def write_begin(self, out: TextIOBase):
		out.write("// Code generated by xsdgen from {}. DO NOT EDIT.\n\n".format(os.path.basename(self.tree.source)))
		out.write("package {}\n".format(self.options.package))
		if any(entity.kind is EntityKind.Element and entity.fields is not None for entity in self.tree):
			out.write("\nimport (\n")
			out.write("\t\"encoding/xml\"\n")
			out.write(")\n")

	def write_doc(self, out: TextIOBase, name: str, entity: SchemaEntity):
		if entity.documentation == "":
			out.write("// {} ...\n".format(name))
		else:
			out.write("// {} is {}\n".format(name, entity.documentation))

	def field_tag(self, shape) -> str:
		if shape.kind is FieldKind.Text:
			return ",chardata"
		tag = shape.name
		if shape.kind is FieldKind.Attribute:
			tag += ",attr"
		if shape.optional and not shape.collection:
			tag += ",omitempty"
		return tag

	def field_type(self, shape) -> str:
		native = self.native_type(shape.type_ref)
		if shape.collection:
			return "[]" + native
		if shape.optional and shape.kind is not FieldKind.Text and not native.startswith("[]"):
			return "*" + native
		return native

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_doc(out, name, entity)
		out.write("type {} struct {{\n".format(name))
		if entity.kind is EntityKind.Element:
			out.write("\tXMLName xml.Name `xml:{}`\n".format(quote(entity.qname.local)))
		for shape in field_shapes(entity):
			self.write_comment(out, shape.documentation, indent="\t")
			out.write("\t{} {} `xml:{}`\n".format(shape.ident, self.field_type(shape), quote(self.field_tag(shape))))
		out.write("}\n")

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_doc(out, name, entity)
		out.write("type {} {}\n".format(name, self.base_native_type(entity)))

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_doc(out, name, entity)
		out.write("type {} string\n\n".format(name))
		out.write("const (\n")
		for ident, value in zip(enum_identifiers(entity.values), entity.values):
			out.write("\t{}{} {} = {}\n".format(name, ident, name, quote(value)))
		out.write(")\n")

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_doc(out, name, entity)
		out.write("type {} []{}\n".format(name, self.native_type(entity.item_type)))
