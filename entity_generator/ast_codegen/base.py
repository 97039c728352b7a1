import ast
import logging
from typing import List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


def add_location(node):
    """Add location info to AST nodes"""
    node.lineno = 1
    node.col_offset = 0
    return node


def create_name(name: str) -> ast.Name:
    return add_location(ast.Name(id=name, ctx=ast.Load()))


def create_attribute(obj_name: str, attr_name: str) -> ast.Attribute:
    """Creates ``obj_name.attr_name``."""
    return add_location(ast.Attribute(value=create_name(obj_name), attr=attr_name, ctx=ast.Load()))


def create_dotted_name(path: str) -> ast.expr:
    """Creates a name or attribute chain from ``a.b.c``."""
    parts = path.split(".")
    node: ast.expr = create_name(parts[0])
    for part in parts[1:]:
        node = add_location(ast.Attribute(value=node, attr=part, ctx=ast.Load()))
    return node


def create_import(module: str, names: Optional[List[str]] = None, level: int = 0) -> Union[ast.Import, ast.ImportFrom]:
    """Creates an AST node for an import statement."""
    if names:
        node = ast.ImportFrom(
            module=module,
            names=[ast.alias(name=name, lineno=1, col_offset=0) for name in names],
            level=level
        )
    else:
        node = ast.Import(names=[ast.alias(name=module, lineno=1, col_offset=0)])

    return add_location(node)


def create_assign(target: str, value: ast.expr) -> ast.Assign:
    """Creates an AST node for an assignment."""
    node = ast.Assign(
        targets=[ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0)],
        value=value
    )
    return add_location(node)


def create_annotated_assign(target: str, annotation: ast.expr, value: Optional[ast.expr] = None) -> ast.AnnAssign:
    """Creates an AST node for ``target: annotation = value``."""
    node = ast.AnnAssign(
        target=ast.Name(id=target, ctx=ast.Store(), lineno=1, col_offset=0),
        annotation=annotation,
        value=value,
        simple=1
    )
    return add_location(node)


def create_subscript(container: str, *items: ast.expr) -> ast.Subscript:
    """Creates ``container[item]`` or ``container[item1, item2]``."""
    if len(items) == 1:
        slice_node = items[0]
    else:
        slice_node = add_location(ast.Tuple(elts=list(items), ctx=ast.Load()))
    node = ast.Subscript(value=create_name(container), slice=slice_node, ctx=ast.Load())
    return add_location(node)


def create_call(func_name: str, args: Optional[List[ast.expr]] = None, keywords: Optional[List[ast.keyword]] = None) -> ast.Call:
    """Creates an AST node for a function call."""
    node = ast.Call(
        func=create_name(func_name),
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


def create_list_of_names(names: Sequence[str]) -> ast.List:
    """Creates an AST List node of bare names."""
    node = ast.List(elts=[create_name(name) for name in names], ctx=ast.Load())
    return add_location(node)


def create_list_of_strings(items: Sequence[str]) -> ast.List:
    """Creates an AST List node containing string constants."""
    node = ast.List(
        elts=[create_string_constant(item) for item in items],
        ctx=ast.Load()
    )
    return add_location(node)


def create_dict(items: Sequence[Tuple[str, ast.expr]]) -> ast.Dict:
    """Creates an AST Dict node with string keys."""
    node = ast.Dict(
        keys=[create_string_constant(key) for key, _ in items],
        values=[value for _, value in items]
    )
    return add_location(node)


def create_string_constant(value: str) -> ast.Constant:
    """Creates an AST Constant node for a string."""
    return add_location(ast.Constant(value=value))


def create_boolean_constant(value: bool) -> ast.Constant:
    """Creates an AST Constant node for a boolean."""
    return add_location(ast.Constant(value=value))


def create_number_constant(value: Union[int, float]) -> ast.Constant:
    """Creates an AST Constant node for an int or float."""
    return add_location(ast.Constant(value=value))


def create_keyword(arg: str, value: ast.expr) -> ast.keyword:
    """Creates an AST keyword argument."""
    return add_location(ast.keyword(arg=arg, value=value))


def unparse(node: ast.AST) -> str:
    """Source text of a single node."""
    return ast.unparse(ast.fix_missing_locations(node))
