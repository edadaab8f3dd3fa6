import os
import re
from io import TextIOBase

from ..model import SchemaEntity
from ..prototype import PrototypeTree
from .base import CodeGenerator, enum_identifiers, field_shapes, with_extension


class CGenerator(CodeGenerator):
	lang = "C"
	extension = ".h"
	type_map = {
		"string": "char *",
		"boolean": "bool",
		"integer": "int64_t",
		"int8": "int8_t",
		"int16": "int16_t",
		"int32": "int32_t",
		"int64": "int64_t",
		"uint8": "uint8_t",
		"uint16": "uint16_t",
		"uint32": "uint32_t",
		"uint64": "uint64_t",
		"float32": "float",
		"float64": "double",
		"decimal": "double",
		"date": "char *",
		"time": "char *",
		"datetime": "char *",
		"duration": "char *",
		"bytes": "unsigned char *",
		"any": "void *",
	}

	def ordered(self, tree: PrototypeTree) -> list:
		# structs hold pointers to each other, but value types must be complete first
		entities = list(tree)
		values = {entity.key(): entity for entity in entities if not entity.is_aggregate()}
		result = []
		seen = set()
		for entity in values.values():
			self.visit_value(entity, values, seen, result)
		return result + [e for e in entities if e.is_aggregate()]

	def visit_value(self, entity: SchemaEntity, values: dict, seen: set, result: list):
		if entity.key() in seen:
			return
		seen.add(entity.key())
		for ref in (entity.base, entity.item_type, entity.type_ref):
			if ref is not None and not ref.is_builtin() and ref.target in values:
				self.visit_value(values[ref.target], values, seen, result)
		result.append(entity)

	def write_begin(self, out: TextIOBase):
		if self.file != "":
			target = self.file_with_extension()
		else:
			target = with_extension(self.tree.source, self.extension)
		guard = re.sub(r"\W", "_", os.path.basename(target)).upper()
		out.write("// Code generated by xsdgen from {}. DO NOT EDIT.\n\n".format(os.path.basename(self.tree.source)))
		out.write("#ifndef {}\n".format(guard))
		out.write("#define {}\n\n".format(guard))
		out.write("#include <stdbool.h>\n")
		out.write("#include <stddef.h>\n")
		out.write("#include <stdint.h>\n")

		aggregates = [entity for entity in self.tree if entity.is_aggregate()]
		if len(aggregates) > 0:
			out.write("\n")
		for entity in aggregates:
			name = self.type_name(entity)
			out.write("typedef struct {} {};\n".format(name, name))

	def write_end(self, out: TextIOBase):
		out.write("\n#endif\n")

	def declare(self, native: str, ident: str) -> str:
		if native.endswith("*"):
			return native + ident
		return native + " " + ident

	def is_aggregate_ref(self, ref) -> bool:
		target = self.tree.lookup(ref)
		return target is not None and target.is_aggregate()

	def write_aggregate(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_comment(out, entity.documentation)
		out.write("struct {} {{\n".format(name))
		for shape in field_shapes(entity):
			native = self.native_type(shape.type_ref)
			self.write_comment(out, shape.documentation, indent="\t")
			if shape.collection:
				out.write("\tstruct {{ {}; size_t len; }} {};\n".format(self.declare(native, "*items"), shape.ident))
				continue
			if self.is_aggregate_ref(shape.type_ref) or (shape.optional and not native.endswith("*")):
				native += " *"
			out.write("\t{};\n".format(self.declare(native, shape.ident)))
		out.write("};\n")

	def write_alias(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_comment(out, entity.documentation)
		out.write("typedef {};\n".format(self.declare(self.base_native_type(entity), self.type_name(entity))))

	def write_enum(self, out: TextIOBase, entity: SchemaEntity):
		name = self.type_name(entity)
		out.write("\n")
		self.write_comment(out, entity.documentation)
		out.write("typedef enum {\n")
		for ident, value in zip(enum_identifiers(entity.values), entity.values):
			out.write("\t{}_{}, // {}\n".format(name, ident, value))
		out.write("}} {};\n".format(name))

	def write_list(self, out: TextIOBase, entity: SchemaEntity):
		out.write("\n")
		self.write_comment(out, entity.documentation)
		out.write("typedef struct {{ {}; size_t len; }} {};\n".format(
			self.declare(self.native_type(entity.item_type), "*items"), self.type_name(entity)))
