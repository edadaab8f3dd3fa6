import os
from io import TextIOBase

from ..model import SchemaEntity
from .base import CodeGenerator, enum_identifiers, field_shapes, quote


class TypeScriptGenerator(CodeGenerator):
	lang = "TypeScript"
	extension = ".ts"
	type_map = {
		"string": "string",
		"boolean": "boolean",
		"integer": "number",
		"int8": "number",
		"int16": "number",
		"int32": "number",
		"int64": "number",
		"uint8": "number",
		"uint16": "number",
		"uint32": "number",
		"uint64": "number",
		"float32": "number",
		"float64": "number",
		"decimal": "number",
		"date": "string",
		"time": "string",
		"datetime": "string",
		"duration": "string",
		"bytes": "Uint8Array",
		"any": "any",
	}

	def write_begin(self, out: TextIOBase):
		out.write("// Code generated by xsdgen from {}. DO NOT EDIT.\n".format(os.path.basename(self.tree.source)))

	def write_doc(self, out: TextIOBase, text: str, indent: str = ""):
		if text != "":
			out.write("{}/** {} */\n".format(indent, text.replace("*/", "* /")))

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("export interface {} {{\n".format(self.type_name(entity)))
		for shape in field_shapes(entity):
			native = self.native_type(shape.type_ref)
			if shape.collection:
				native = "Array<{}>".format(native)
			self.write_doc(out, shape.documentation, "\t")
			out.write("\t{}{}: {};\n".format(shape.ident, "?" if shape.optional else "", native))
		out.write("}\n")

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("export type {} = {};\n".format(self.type_name(entity), self.base_native_type(entity)))

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("export enum {} {{\n".format(self.type_name(entity)))
		for ident, value in zip(enum_identifiers(entity.values), entity.values):
			out.write("\t{} = {},\n".format(ident, quote(value)))
		out.write("}\n")

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("export type {} = Array<{}>;\n".format(self.type_name(entity), self.native_type(entity.item_type)))
