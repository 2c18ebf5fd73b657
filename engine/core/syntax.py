"""
Syntax tree construction for generated modules.
Generated code is assembled from stdlib ast nodes and rendered with ast.unparse,
so ordering is explicit and no source text is concatenated by hand.
"""
import ast
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union
from pydantic import BaseModel, ConfigDict

HEADER = "# Generated by featuregen. Do not edit."

Expr = Union[str, ast.expr]


class GeneratedFile(BaseModel):
    """One rendered output file, path relative to the output root."""
    model_config = ConfigDict(frozen=True)

    path: str
    content: str


def _expr(value: Expr) -> ast.expr:
    return dotted(value) if isinstance(value, str) else value


def name(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Load())


def dotted(path: str) -> ast.expr:
    """'FilterSettingsConfig.DEFAULT.minZoom' as an attribute chain."""
    head, *rest = path.split(".")
    node: ast.expr = name(head)
    for part in rest:
        node = ast.Attribute(value=node, attr=part, ctx=ast.Load())
    return node


def attribute(value: Expr, attr: str) -> ast.Attribute:
    return ast.Attribute(value=_expr(value), attr=attr, ctx=ast.Load())


def const(value: Any) -> ast.Constant:
    return ast.Constant(value=value, kind=None)


def call(func: Expr, args: Sequence[ast.expr] = (), keywords: Sequence[Tuple[str, ast.expr]] = ()) -> ast.Call:
    return ast.Call(
        func=_expr(func),
        args=list(args),
        keywords=[ast.keyword(arg=key, value=value) for key, value in keywords],
    )


def subscript(value: Expr, index: Expr) -> ast.Subscript:
    return ast.Subscript(value=_expr(value), slice=_expr(index), ctx=ast.Load())


def optional(annotation: Expr) -> ast.Subscript:
    return subscript("Optional", annotation)


def tuple_of(elements: Sequence[ast.expr]) -> ast.Tuple:
    return ast.Tuple(elts=list(elements), ctx=ast.Load())


def is_none(value: Expr, negate: bool = False) -> ast.Compare:
    return ast.Compare(left=_expr(value), ops=[ast.IsNot() if negate else ast.Is()], comparators=[const(None)])


def if_else(test: ast.expr, body: ast.expr, orelse: ast.expr) -> ast.IfExp:
    return ast.IfExp(test=test, body=body, orelse=orelse)


def both(*values: ast.expr) -> ast.BoolOp:
    return ast.BoolOp(op=ast.And(), values=list(values))


def await_(value: ast.expr) -> ast.Await:
    return ast.Await(value=value)


def list_comp(element: ast.expr, target: str, iterable: Expr) -> ast.ListComp:
    """'[element for target in iterable]'."""
    return ast.ListComp(
        elt=element,
        generators=[ast.comprehension(
            target=ast.Name(id=target, ctx=ast.Store()),
            iter=_expr(iterable),
            ifs=[],
            is_async=0,
        )],
    )


def docstring(text: str) -> ast.Expr:
    return ast.Expr(value=const(text))


def ann_assign(target: str, annotation: Expr, value: Optional[ast.expr] = None) -> ast.AnnAssign:
    return ast.AnnAssign(
        target=ast.Name(id=target, ctx=ast.Store()),
        annotation=_expr(annotation),
        value=value,
        simple=1,
    )


def assign(target: Union[str, ast.expr], value: ast.expr) -> ast.Assign:
    if isinstance(target, str):
        target = dotted(target)
    target = _as_store(target)
    return ast.Assign(targets=[target], value=value, type_comment=None)


def _as_store(node: ast.expr) -> ast.expr:
    if isinstance(node, ast.Name):
        return ast.Name(id=node.id, ctx=ast.Store())
    if isinstance(node, ast.Attribute):
        return ast.Attribute(value=node.value, attr=node.attr, ctx=ast.Store())
    return node


def returns(value: ast.expr) -> ast.Return:
    return ast.Return(value=value)


def raise_(exc: Expr) -> ast.Raise:
    return ast.Raise(exc=_expr(exc), cause=None)


def if_then(test: ast.expr, body: List[ast.stmt]) -> ast.If:
    return ast.If(test=test, body=body, orelse=[])


def try_except(body: List[ast.stmt], exc_type: str, exc_name: str, handler: List[ast.stmt]) -> ast.Try:
    return ast.Try(
        body=body,
        handlers=[ast.ExceptHandler(type=name(exc_type), name=exc_name, body=handler)],
        orelse=[],
        finalbody=[],
    )


def _with_type_params(node_type: type, **fields: Any) -> Any:
    if "type_params" in node_type._fields:
        fields["type_params"] = []
    return node_type(**fields)


def class_def(
    class_name: str,
    body: List[ast.stmt],
    bases: Sequence[Expr] = (),
    decorators: Sequence[ast.expr] = (),
) -> ast.ClassDef:
    return _with_type_params(
        ast.ClassDef,
        name=class_name,
        bases=[_expr(base) for base in bases],
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=list(decorators),
    )


def function_def(
    function_name: str,
    params: Sequence[Tuple[str, Optional[Expr]]],
    body: List[ast.stmt],
    returns_annotation: Optional[Expr] = None,
    vararg: Optional[Tuple[str, Optional[Expr]]] = None,
    is_async: bool = False,
    decorators: Sequence[Expr] = (),
) -> ast.stmt:
    """
    Build a function definition.

    Args:
        function_name: Name of the function
        params: Positional parameters as (name, annotation) pairs
        body: Statements of the function body
        returns_annotation: Return annotation, if any
        vararg: Optional *args parameter as (name, annotation)
        is_async: Whether to emit 'async def'
        decorators: Decorator expressions, outermost first
    """
    def make_arg(arg_name: str, annotation: Optional[Expr]) -> ast.arg:
        return ast.arg(arg=arg_name, annotation=_expr(annotation) if annotation is not None else None, type_comment=None)

    arguments = ast.arguments(
        posonlyargs=[],
        args=[make_arg(arg_name, annotation) for arg_name, annotation in params],
        vararg=make_arg(*vararg) if vararg else None,
        kwonlyargs=[],
        kw_defaults=[],
        kwarg=None,
        defaults=[],
    )
    return _with_type_params(
        ast.AsyncFunctionDef if is_async else ast.FunctionDef,
        name=function_name,
        args=arguments,
        body=body or [ast.Pass()],
        decorator_list=[_expr(decorator) for decorator in decorators],
        returns=_expr(returns_annotation) if returns_annotation is not None else None,
        type_comment=None,
    )


def unparse(node: ast.AST) -> str:
    """
    Render a node built by the helpers above.

    The helpers create nodes without source positions, which ast.unparse reads
    from statements; a statement is wrapped in a module and located first.
    """
    if isinstance(node, ast.stmt):
        node = ast.Module(body=[node], type_ignores=[])
    return ast.unparse(ast.fix_missing_locations(node))


class SourceModule:
    """
    In-memory syntax tree of one generated module.

    Imports are collected separately and rendered sorted: absolute imports
    first, then package-relative ones.
    """

    def __init__(self, path: str, doc: Optional[str] = None) -> None:
        self.path = path
        self.doc = doc
        self._imports: Dict[Tuple[int, str], Set[str]] = {}
        self._body: List[ast.stmt] = []

    def add_import(self, module: str, *names: str, level: int = 0) -> None:
        self._imports.setdefault((level, module), set()).update(names)

    def add(self, *statements: ast.stmt) -> None:
        self._body.extend(statements)

    def extend(self, statements: Iterable[ast.stmt]) -> None:
        self._body.extend(statements)

    def _import_nodes(self) -> List[ast.ImportFrom]:
        return [
            ast.ImportFrom(
                module=module,
                names=[ast.alias(name=imported, asname=None) for imported in sorted(names)],
                level=level,
            )
            for (level, module), names in sorted(self._imports.items())
        ]

    def render(self) -> str:
        head = HEADER
        if self.doc:
            head += "\n" + unparse(docstring(self.doc))

        sections = [head]
        imports = self._import_nodes()
        if imports:
            sections.append("\n".join(unparse(node) for node in imports))
        text = "\n\n".join(sections)

        if self._body:
            text += "\n\n\n" + "\n\n\n".join(unparse(statement) for statement in self._body)
        return text + "\n"

    def to_file(self) -> GeneratedFile:
        return GeneratedFile(path=self.path, content=self.render())
