"""CLI dashboard — prints the current signal to the console."""

_INDICATOR_ROWS = (
    ("rsi", "RSI"),
    ("macd", "MACD"),
    ("ma_cross", "MA Cross"),
    ("bollinger", "Bollinger Bands"),
)


def _vote(direction: float) -> str:
    if direction >= 1:
        return "BUY"
    if direction > 0:
        return "weak buy"
    if direction <= -1:
        return "SELL"
    if direction < 0:
        return "weak sell"
    return "neutral"


def _fmt_value(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def format_signal_status(state: dict) -> str:
    """Format and print the engine state.

    Args:
        state: Dict as returned by ``SignalEngine.state``.

    Returns:
        The formatted string (also printed to stdout).
    """
    pair = state.get("pair", "N/A")
    last = state.get("last_signal")
    settings = state.get("settings") or {}

    lines = [f"──────────────── {pair} Signal ────────────────"]
    if last is None:
        lines.append("  No signal computed yet.")
    else:
        rate = last.get("rate")
        direction = last.get("signal", 0)
        label = "BUY" if direction > 0 else "SELL" if direction < 0 else "NEUTRAL"
        lines += [
            f"  Rate:            {rate:.5f}" if rate is not None else "  Rate:            N/A",
            f"  Signal:          {label}",
            f"  Strength:        {last.get('strength', 0)}%",
            f"  Mode:            {last.get('mode', 'N/A')}",
            f"  Updated:         {last.get('timestamp', 'N/A')}",
            "  Indicators:",
        ]
        details = last.get("details") or {}
        for key, title in _INDICATOR_ROWS:
            row = details.get(key)
            if row is None:
                lines.append(f"    {title:<16} N/A")
                continue
            lines.append(
                f"    {title:<16} {_vote(row['signal']):<10} {_fmt_value(row['value'])}"
            )

    if state.get("stale"):
        lines.append(f"  STALE: {state.get('last_error')}")
    lines += [
        f"  Refresh every:   {settings.get('refresh_interval_minutes', '?')} min",
        f"  Notify at:       {settings.get('signal_strength_threshold', '?')}%"
        f" ({'on' if settings.get('notifications_enabled') else 'off'})",
        "─" * 48,
    ]
    output = "\n".join(lines)
    print(output)
    return output
