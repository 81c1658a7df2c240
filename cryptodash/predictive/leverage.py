DEFAULT_INITIAL_MARGIN = 1050.0


def leverage_profit(expected_return: float, initial_margin: float = DEFAULT_INITIAL_MARGIN, leverage: float = 10) -> float:
    """
    Hypothetical P&L of a leveraged position that realises ``expected_return`` (%).

    Signed like the return and never clamped: a loss can exceed the margin
    because liquidation is not modelled.
    """
    if leverage <= 0:
        raise ValueError("leverage must be positive")
    return initial_margin * (expected_return / 100) * leverage
