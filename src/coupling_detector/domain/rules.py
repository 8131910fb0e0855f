"""Rule matching: decide which references of a node break a rule."""

from typing import Optional

from coupling_detector.domain.entities import (
    Node,
    QualifiedName,
    Rule,
    RuleType,
    TokenViolation,
    Violation,
)


class RuleMatcher:
    """Pure, order-preserving matcher of node references against a rule."""

    @staticmethod
    def in_scope(node: Node, rule: Rule) -> bool:
        """A node is checked only when its declared namespace is under the rule subject."""
        return node.declared_namespace.is_under(rule.subject)

    @staticmethod
    def _is_under_any(symbol: QualifiedName, prefixes: tuple[QualifiedName, ...]) -> bool:
        return any(symbol.is_under(prefix) for prefix in prefixes)

    def _breaks(self, symbol: QualifiedName, rule: Rule) -> bool:
        if rule.type is RuleType.ONLY:
            return not self._is_under_any(symbol, rule.prefixes)
        return self._is_under_any(symbol, rule.prefixes)

    def match(self, node: Node, rule: Rule) -> list[TokenViolation]:
        """Return the offending (symbol, location) pairs in file order; empty when none."""
        if not self.in_scope(node, rule):
            return []
        return [
            TokenViolation(symbol=reference.symbol, location=reference.location)
            for reference in node.references
            if self._breaks(reference.symbol, rule)
        ]

    def check(self, node: Node, rule: Rule) -> Optional[Violation]:
        """Bundle every match of the node into one violation, or None."""
        tokens = self.match(node, rule)
        if not tokens:
            return None
        return Violation(
            node=node,
            rule=rule,
            token_violations=tuple(tokens),
            type=rule.violation_type,
        )
