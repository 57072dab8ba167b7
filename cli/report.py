"""Win-rate table for batch simulations."""

from flip7.statistics.simulation import SimulationReport

WIDTH = 60


def performance_label(rate: float) -> str:
    """Bucket a win rate (0.0-1.0) into a label."""
    if rate >= 0.50:
        return "DOMINANT"
    if rate >= 0.35:
        return "STRONG"
    if rate >= 0.20:
        return "DECENT"
    return "WEAK"


def format_report(report: SimulationReport, strategies: dict[str, str] | None = None) -> str:
    """
    Render a simulation report as a ranked table.

    Args:
        report: Results from ``simulate``
        strategies: Optional player name -> strategy name, shown per row
    """
    strategies = strategies or {}
    lines = [
        "=" * WIDTH,
        f"SIMULATION RESULTS - {report.games} GAMES COMPLETED",
        "=" * WIDTH,
        f"{'PLAYER':<20} {'WINS':>8} {'WIN RATE':>10} {'PERFORMANCE':>12}",
        "-" * WIDTH,
    ]
    for name, wins in report.ranking():
        rate = report.win_rate(name)
        label = f"{name} ({strategies[name]})" if name in strategies else name
        lines.append(f"{label:<20} {wins:>8} {rate * 100:>9.1f}% {performance_label(rate):>12}")
    lines.extend(
        [
            "-" * WIDTH,
            f"Total Games: {report.games}",
            f"Average Rounds: {report.average_rounds:.1f}",
            "Flip 7s: " + ", ".join(f"{n} {c}" for n, c in report.flip7_counts.items()),
            "Busts: " + ", ".join(f"{n} {c}" for n, c in report.bust_counts.items()),
        ]
    )
    return "\n".join(lines)
