"""Parsing of free-text trade descriptions."""

from typing import Optional, Tuple

from trade_recon.config.settings import DEFAULT_RULES, ReconciliationRules
from trade_recon.reconciler.normalizer import standardize_number

ParsedDescription = Tuple[Optional[str], Optional[str], Optional[float], Optional[float]]

EMPTY_DESCRIPTION: ParsedDescription = (None, None, None, None)


class DescriptionParser:
    """Extracts security, currency, quantity and price from a trade description.

    Descriptions look like ``Bought 1,000 APPLE INC @ USD 150.25``. The
    Bought/Sold verb is matched but not returned: the sign of a trade comes
    from its reference prefix, not from the wording.
    """

    def __init__(self, rules: ReconciliationRules = DEFAULT_RULES) -> None:
        self.rules = rules
        self.pattern = rules.compile_description()

    def parse(self, description: Optional[str]) -> ParsedDescription:
        """Parse a description.

        Args:
            description: Description text, possibly empty or None.

        Returns:
            ``(security, currency, quantity, price)``, all None when the text
            does not match.
        """
        if not description:
            return EMPTY_DESCRIPTION

        match = self.pattern.search(description)
        if not match:
            return EMPTY_DESCRIPTION

        _action, quantity_str, security, currency, price_str = match.groups()
        return (
            security.strip(),
            currency,
            standardize_number(quantity_str),
            standardize_number(price_str),
        )


_default_parser = DescriptionParser()


def parse_description(description: Optional[str]) -> ParsedDescription:
    """Parse a description with the default rules."""
    return _default_parser.parse(description)
