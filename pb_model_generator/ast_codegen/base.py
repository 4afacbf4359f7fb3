import ast
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)


# Import groups, rendered in this order
FUTURE_GROUP = 0
STDLIB_GROUP = 1
THIRD_PARTY_GROUP = 2
LOCAL_GROUP = 3

STDLIB_MODULES = frozenset({"datetime", "enum", "typing"})


def add_location(node):
    """Add location info to AST nodes"""
    node.lineno = 1
    node.col_offset = 0
    return node


def create_docstring(content: str) -> ast.Expr:
    """Creates an AST node for a docstring."""
    return add_location(ast.Expr(value=create_string_constant(content)))


def create_import(module: Optional[str], names: Optional[List[str]] = None, level: int = 0) -> ast.Import | ast.ImportFrom:
    """Creates an AST node for an import statement."""
    if names:
        node = ast.ImportFrom(
            module=module or None,
            names=[ast.alias(name=name, lineno=1, col_offset=0) for name in names],
            level=level
        )
    else:
        node = ast.Import(names=[ast.alias(name=module, lineno=1, col_offset=0)])
    return add_location(node)


def create_name(name: str) -> ast.Name:
    """Creates an AST Name node in load context."""
    return add_location(ast.Name(id=name, ctx=ast.Load()))


def create_dotted_name(dotted: str) -> ast.expr:
    """Creates a Name or nested Attribute node for a dotted path like 'user_data.UserData'."""
    parts = dotted.split(".")
    node: ast.expr = create_name(parts[0])
    for part in parts[1:]:
        node = add_location(ast.Attribute(value=node, attr=part, ctx=ast.Load()))
    return node


def create_annotation(type_expr: str) -> ast.expr:
    """Creates an AST expression for a type annotation such as 'Optional[List[str]]'."""
    return ast.parse(type_expr, mode="eval").body


def create_assign(target: str, value: ast.expr) -> ast.Assign:
    """Creates an AST node for an assignment."""
    node = ast.Assign(
        targets=[ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0)],
        value=value
    )
    return add_location(node)


def create_ann_assign(target: str, annotation: str, value: Optional[ast.expr] = None) -> ast.AnnAssign:
    """Creates an AST node for an annotated assignment (a class member)."""
    node = ast.AnnAssign(
        target=ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0),
        annotation=create_annotation(annotation),
        value=value,
        simple=1
    )
    return add_location(node)


def create_call(func_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a function call."""
    node = ast.Call(
        func=create_dotted_name(func_name),
        args=args or [],
        keywords=keywords or []
    )
    return add_location(node)


def create_attribute_call(obj_name: str, attr_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a method call on an object."""
    attr = add_location(ast.Attribute(
        value=create_name(obj_name),
        attr=attr_name,
        ctx=ast.Load()
    ))
    node = ast.Call(
        func=attr,
        args=args or [],
        keywords=keywords or []
    )
    return add_location(node)


def create_class_def(name: str, bases: List[str], body: List[ast.stmt], decorator_list: Optional[List[ast.expr]] = None) -> ast.ClassDef:
    """Creates an AST node for a class definition."""
    node = ast.ClassDef(
        name=name,
        bases=[create_dotted_name(base) for base in bases],
        keywords=[],
        body=body,
        decorator_list=decorator_list or []
    )
    return add_location(node)


def create_function_def(
    name: str,
    params: List[Tuple[str, Optional[str]]],
    body: List[ast.stmt],
    returns: Optional[str] = None,
    decorator_list: Optional[List[ast.expr]] = None,
) -> ast.FunctionDef:
    """
    Creates an AST node for a function or method definition.

    Args:
        name: Function name
        params: (name, annotation) pairs; annotation may be None
        body: Function body statements
        returns: Return annotation
        decorator_list: Decorator expressions
    """
    arguments = add_location(ast.arguments(
        posonlyargs=[],
        args=[
            add_location(ast.arg(arg=param, annotation=create_annotation(annotation) if annotation else None))
            for param, annotation in params
        ],
        kwonlyargs=[],
        kw_defaults=[],
        defaults=[],
    ))
    node = ast.FunctionDef(
        name=name,
        args=arguments,
        body=body,
        decorator_list=decorator_list or [],
        returns=create_annotation(returns) if returns else None
    )
    return add_location(node)


def create_return(value: ast.expr) -> ast.Return:
    """Creates an AST node for a return statement."""
    return add_location(ast.Return(value=value))


def create_expression(value: ast.expr) -> ast.Expr:
    """Creates an AST node for an expression statement."""
    return add_location(ast.Expr(value=value))


def create_list_of_strings(items: List[str]) -> ast.List:
    """Creates an AST List node containing string constants."""
    node = ast.List(
        elts=[create_string_constant(item) for item in items],
        ctx=ast.Load()
    )
    return add_location(node)


def create_string_constant(value: str) -> ast.Constant:
    """Creates an AST Constant node for a string."""
    return add_location(ast.Constant(value=value))


def create_boolean_constant(value: bool) -> ast.Constant:
    """Creates an AST Constant node for a boolean."""
    return add_location(ast.Constant(value=value))


def create_none_constant() -> ast.Constant:
    """Creates an AST Constant node for None."""
    return add_location(ast.Constant(value=None))


def create_keyword(arg: str, value: ast.expr) -> ast.keyword:
    """Creates an AST keyword argument."""
    return add_location(ast.keyword(arg=arg, value=value))


def create_module(body: List[ast.stmt]) -> ast.Module:
    """Creates an AST Module with locations filled in for every node."""
    return ast.fix_missing_locations(add_location(ast.Module(body=body, type_ignores=[])))


@dataclass(frozen=True)
class ImportSpec:
    """One 'from <module> import <names>' statement."""

    module: str
    names: Tuple[str, ...]
    level: int = 0

    @property
    def group(self) -> int:
        if self.module == "__future__":
            return FUTURE_GROUP
        if self.level:
            return LOCAL_GROUP
        if self.module.split(".")[0] in STDLIB_MODULES:
            return STDLIB_GROUP
        return THIRD_PARTY_GROUP

    @property
    def sort_key(self) -> Tuple[int, int, str]:
        return (self.group, self.level, self.module)

    def to_ast(self) -> ast.ImportFrom:
        return create_import(self.module, list(self.names), level=self.level)


class ImportCollector:
    """
    Collects the names a generated module needs and emits a deterministic
    import list: deduplicated, grouped, sorted by module then by name.
    """

    def __init__(self):
        self._imports: Dict[Tuple[str, int], Set[str]] = {}

    def add(self, module: str, *names: str, level: int = 0) -> "ImportCollector":
        self._imports.setdefault((module, level), set()).update(names)
        return self

    def specs(self) -> List[ImportSpec]:
        specs = [
            ImportSpec(module=module, names=tuple(sorted(names)), level=level)
            for (module, level), names in self._imports.items()
            if names
        ]
        return sorted(specs, key=lambda spec: spec.sort_key)
