"""Import, export and issue extraction from a tree-sitter parse tree."""

from __future__ import annotations

from dataclasses import dataclass, field

from tree_sitter import Node, Tree

from . import rules
from .models import Issue
from .treesitter_parser import line_of, node_text, string_value, walk

_FUNCTION_NODES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

_NAMED_DECLARATIONS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "class_declaration",
        "abstract_class_declaration",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
        "module",
        "internal_module",
    }
)


@dataclass
class AstExtraction:
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    has_errors: bool = False


def extract_from_tree(tree: Tree, depth: str) -> AstExtraction:
    """Single pass over the tree collecting imports, exports and issues."""
    enabled = rules.active_rules(depth)
    result = AstExtraction(has_errors=tree.root_node.has_error)

    for node in walk(tree.root_node):
        kind = node.type

        if kind == "import_statement":
            _add_import(result, string_value(node.child_by_field_name("source")))
        elif kind == "export_statement":
            _add_import(result, string_value(node.child_by_field_name("source")))
            result.exports.extend(_export_names(node))
        elif kind == "call_expression":
            _visit_call(node, result, enabled)
        elif kind == "new_expression":
            constructor = node.child_by_field_name("constructor")
            if (
                rules.FUNCTION_CONSTRUCTOR.rule_id in enabled
                and constructor is not None
                and node_text(constructor) == "Function"
            ):
                result.issues.append(rules.FUNCTION_CONSTRUCTOR.issue(line_of(node)))
        elif kind == "assignment_expression":
            left = node.child_by_field_name("left")
            if (
                rules.INNER_HTML.rule_id in enabled
                and left is not None
                and left.type == "member_expression"
                and node_text(left.child_by_field_name("property")) == "innerHTML"
            ):
                result.issues.append(rules.INNER_HTML.issue(line_of(node)))
        elif kind == "string":
            value = string_value(node)
            if rules.INSECURE_HTTP.rule_id in enabled and value and rules.is_insecure_url(value):
                result.issues.append(rules.INSECURE_HTTP.issue(line_of(node)))
        elif kind == "debugger_statement":
            if rules.DEBUGGER.rule_id in enabled:
                result.issues.append(rules.DEBUGGER.issue(line_of(node)))

        if kind in _FUNCTION_NODES and rules.LONG_FUNCTION.rule_id in enabled:
            span = node.end_point[0] - node.start_point[0] + 1
            if span > rules.LONG_FUNCTION_LINES:
                result.issues.append(rules.LONG_FUNCTION.issue(line_of(node)))

    return result


def _add_import(result: AstExtraction, specifier: str | None) -> None:
    if specifier and specifier not in result.imports:
        result.imports.append(specifier)


def _visit_call(node: Node, result: AstExtraction, enabled: frozenset[str]) -> None:
    function = node.child_by_field_name("function")
    if function is None:
        return
    arguments = node.child_by_field_name("arguments")
    callee = node_text(function)

    # require("x") and dynamic import("x")
    if function.type == "import" or (function.type == "identifier" and callee == "require"):
        if arguments is not None and arguments.named_children:
            _add_import(result, string_value(arguments.named_children[0]))
        return

    if function.type == "identifier" and callee == "eval":
        if rules.EVAL_USAGE.rule_id in enabled:
            result.issues.append(rules.EVAL_USAGE.issue(line_of(node)))
        return

    if rules.SYNC_FS.rule_id in enabled:
        name = callee
        if function.type == "member_expression":
            name = node_text(function.child_by_field_name("property"))
        if name in rules.SYNC_FS_CALLS:
            result.issues.append(rules.SYNC_FS.issue(line_of(node)))


def _export_names(node: Node) -> list[str]:
    names: list[str] = []
    if any(child.type == "default" for child in node.children):
        return ["default"]

    declaration = node.child_by_field_name("declaration")
    if declaration is not None:
        if declaration.type in _NAMED_DECLARATIONS:
            name = node_text(declaration.child_by_field_name("name"))
            if name:
                names.append(name)
        elif declaration.type in ("lexical_declaration", "variable_declaration"):
            for child in declaration.named_children:
                if child.type == "variable_declarator":
                    name_node = child.child_by_field_name("name")
                    if name_node is not None and name_node.type == "identifier":
                        names.append(node_text(name_node))
        return names

    for child in node.named_children:
        if child.type != "export_clause":
            continue
        for spec in child.named_children:
            if spec.type != "export_specifier":
                continue
            alias = spec.child_by_field_name("alias")
            exported = alias if alias is not None else spec.child_by_field_name("name")
            name = node_text(exported)
            if name:
                names.append(name)
    return names
