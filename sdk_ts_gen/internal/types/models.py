from typing import Optional, Union

from pydantic import BaseModel

INDENT = "  "


def indent_lines(code: str, level: int = 1) -> str:
    """Сдвиг непустых строк на level уровней по 2 пробела"""
    prefix = INDENT * level
    return "\n".join(prefix + line if line.strip() else "" for line in code.split("\n"))


def jsdoc(lines: list[str], level: int = 0) -> str:
    prefix = INDENT * level
    body = "\n".join(f"{prefix} * {line}".rstrip() for line in lines)
    return f"{prefix}/**\n{body}\n{prefix} */"


class CodeBlock(BaseModel):
    order: int = 0
    code: str = ""

    def __str__(self):
        return self.code.replace("\t", INDENT)


class TsProperty(BaseModel):
    """Свойство интерфейса: ``name?: type | null;``"""

    name: str
    type: str

    optional: bool = True
    nullable: bool = False
    comment: Optional[str] = None

    def render(self, level: int = 1) -> str:
        prefix = INDENT * level
        lines = []
        if self.comment:
            lines.append(jsdoc(self.comment.split("\n"), level))

        var_type = self.type + (" | null" if self.nullable else "")
        # Многострочный тип (вложенный объект) сдвигается вместе со свойством
        first, _, rest = var_type.partition("\n")
        if rest:
            var_type = first + "\n" + indent_lines(rest, level)
        lines.append(f"{prefix}{self.name}{'?' if self.optional else ''}: {var_type};")
        return "\n".join(lines)

    def inline(self) -> str:
        """Запись свойства внутри объектного литерала ``{ a?: string }``"""
        var_type = self.type + (" | null" if self.nullable else "")
        return f"{self.name}{'?' if self.optional else ''}: {var_type}"

    def __str__(self):
        return self.render()


class TsInterface(BaseModel):
    name: str
    properties: list[TsProperty] = []

    exported: bool = True
    extends: list[str] = []
    # Пустая строка между свойствами (как в интерфейсах параметров)
    spaced: bool = False

    order: int = 0

    def __str__(self) -> str:
        head = (
            ("export " if self.exported else "")
            + f"interface {self.name}"
            + (f" extends {', '.join(self.extends)}" if self.extends else "")
        )
        separator = "\n\n" if self.spaced else "\n"
        body = separator.join(p.render(1) for p in self.properties)
        return head + " {\n" + (body + "\n" if body else "") + "}"


class TsTypeAlias(BaseModel):
    name: str
    value: str

    exported: bool = True
    order: int = 0

    def __str__(self) -> str:
        return ("export " if self.exported else "") + f"type {self.name} = {self.value};"


class TsArgument(BaseModel):
    name: str
    type: str
    default: Optional[str] = None

    def __str__(self):
        return f"{self.name}: {self.type}" + (f" = {self.default}" if self.default else "")


class TsMethod(BaseModel):
    name: str
    arguments: list[TsArgument] = []
    # None - без аннотации возвращаемого типа (constructor)
    response: Optional[str] = "void"

    async_def: bool = False
    visibility: str = "public"
    doc: list[str] = []

    code: CodeBlock = CodeBlock()

    order: int = 0

    def __str__(self) -> str:
        head = " ".join(
            filter(bool, [self.visibility, "async" if self.async_def else "", self.name])
        )
        signature = f"{head}({', '.join(map(str, self.arguments))})"
        if self.response is not None:
            response = f"Promise<{self.response}>" if self.async_def else self.response
            signature += f": {response}"

        lines = []
        if self.doc:
            lines.append(jsdoc(self.doc))
        lines.append(signature + " {")
        code = str(self.code)
        if code:
            lines.append(indent_lines(code))
        lines.append("}")
        return "\n".join(lines)


class TsClass(BaseModel):
    name: str

    exported: bool = True
    members: list[str] = []
    methods: dict[str, TsMethod] = {}

    order: int = 0

    def __str__(self) -> str:
        parts = []
        if self.members:
            parts.append("\n".join(self.members))
        parts.extend(
            str(m) for m in sorted(self.methods.values(), key=lambda x: x.order, reverse=True)
        )
        body = "\n\n".join(indent_lines(p) for p in parts)
        return (
            ("export " if self.exported else "")
            + f"class {self.name} {{\n"
            + (body + "\n" if body else "")
            + "}"
        )

    def add_method(self, method: Union["TsMethod", str], **kwargs) -> "TsMethod":
        if isinstance(method, str):
            method = TsMethod(name=method, **kwargs)

        self.methods[method.name] = method
        return method


Block = Union[TsClass, TsInterface, TsTypeAlias, CodeBlock]


class CodeFile(BaseModel):
    file_name: str

    header: list[str] = []
    imports: list[str] = []
    code_blocks: list[Block] = []

    def __str__(self):
        blocks = sorted(self.code_blocks, key=lambda x: x.order, reverse=True)
        return (
            "\n\n".join(
                filter(
                    bool,
                    [
                        "\n".join(self.header),
                        "\n\n".join(self.imports),
                        "\n\n".join(str(b) for b in blocks),
                    ],
                )
            )
            + "\n"
        )

    def add_block(self, block: Union[Block, str], **kwargs) -> "CodeFile":
        if isinstance(block, str):
            block = CodeBlock(code=block, **kwargs)

        self.code_blocks.append(block)
        return self


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        if isinstance(file_name, str):
            file_name = CodeFile(file_name=file_name, **kwargs)

        self.files.append(file_name)
        return file_name

    def get_file(self, file_name: str) -> Optional[CodeFile]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None
