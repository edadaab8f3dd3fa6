import os
from io import TextIOBase

from ..model import EntityKind, FieldKind, SchemaEntity
from .base import CodeGenerator, enum_identifiers, field_shapes, quote


class JavaGenerator(CodeGenerator):
	lang = "Java"
	extension = ".java"
	type_map = {
		"string": "String",
		"boolean": "boolean",
		"integer": "long",
		"int8": "byte",
		"int16": "short",
		"int32": "int",
		"int64": "long",
		"uint8": "short",
		"uint16": "int",
		"uint32": "long",
		"uint64": "java.math.BigInteger",
		"float32": "float",
		"float64": "double",
		"decimal": "java.math.BigDecimal",
		"date": "String",
		"time": "String",
		"datetime": "String",
		"duration": "String",
		"bytes": "byte[]",
		"any": "Object",
	}

	boxed: dict = {
		"boolean": "Boolean",
		"byte": "Byte",
		"short": "Short",
		"int": "Integer",
		"long": "Long",
		"float": "Float",
		"double": "Double",
	}

	def write_begin(self, out: TextIOBase):
		out.write("// Code generated by xsdgen from {}. DO NOT EDIT.\n\n".format(os.path.basename(self.tree.source)))
		out.write("package {};\n\n".format(self.options.package))
		out.write("import jakarta.xml.bind.annotation.*;\n")
		if any(entity.kind is EntityKind.List or any(shape.collection for shape in field_shapes(entity)) for entity in self.tree):
			out.write("import java.util.List;\n")

	def write_doc(self, out: TextIOBase, text: str, indent: str = ""):
		if text != "":
			out.write("{}/** {} */\n".format(indent, text.replace("*/", "* /")))

	def field_type(self, shape) -> str:
		native = self.native_type(shape.type_ref)
		if shape.collection:
			return "List<{}>".format(self.boxed.get(native, native))
		if shape.optional:
			return self.boxed.get(native, native)
		return native

	def field_annotation(self, shape) -> str:
		if shape.kind is FieldKind.Text:
			return "@XmlValue"
		if shape.kind is FieldKind.Attribute:
			annotation = "@XmlAttribute(name = {}".format(quote(shape.name))
		else:
			annotation = "@XmlElement(name = {}".format(quote(shape.name))
		if not shape.optional:
			annotation += ", required = true"
		return annotation + ")"

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		if entity.kind is EntityKind.Element:
			out.write("@XmlRootElement(name = {})\n".format(quote(entity.qname.local)))
		out.write("@XmlAccessorType(XmlAccessType.FIELD)\n")
		out.write("class {} {{\n".format(self.type_name(entity)))
		for shape in field_shapes(entity):
			self.write_doc(out, shape.documentation, "\t")
			out.write("\t{}\n".format(self.field_annotation(shape)))
			out.write("\tprotected {} {};\n".format(self.field_type(shape), shape.ident))
		out.write("}\n")

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		# java has no type aliases, wrap the value instead
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("@XmlAccessorType(XmlAccessType.FIELD)\n")
		out.write("class {} {{\n".format(self.type_name(entity)))
		out.write("\t@XmlValue\n")
		out.write("\tprotected {} value;\n".format(self.base_native_type(entity)))
		out.write("}\n")

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("@XmlEnum\n")
		out.write("enum {} {{\n".format(self.type_name(entity)))
		for ident, value in zip(enum_identifiers(entity.values), entity.values):
			out.write("\t@XmlEnumValue({})\n".format(quote(value)))
			out.write("\t{}({}),\n".format(ident, quote(value)))
		out.write("\t;\n\n")
		out.write("\tprivate final String value;\n\n")
		out.write("\t{}(String value) {{\n".format(self.type_name(entity)))
		out.write("\t\tthis.value = value;\n")
		out.write("\t}\n\n")
		out.write("\tpublic String value() {\n")
		out.write("\t\treturn value;\n")
		out.write("\t}\n")
		out.write("}\n")

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		native = self.native_type(entity.item_type)
		out.write("\n")
		self.write_doc(out, entity.documentation)
		out.write("@XmlAccessorType(XmlAccessType.FIELD)\n")
		out.write("class {} {{\n".format(self.type_name(entity)))
		out.write("\t@XmlValue\n")
		out.write("\tprotected List<{}> value;\n".format(self.boxed.get(native, native)))
		out.write("}\n")
