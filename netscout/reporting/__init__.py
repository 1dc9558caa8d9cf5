"""NETscout Reporting — Public API

Renders final scan results as text, JSON or CSV.

Usage:
    from netscout.reporting import ResultWriter
    writer = ResultWriter(fmt="json", stream=sys.stdout)
    writer.write(session.final_summary(), session.all_results())
"""
from netscout.reporting.writers import ResultWriter, OutputError, CSV_HEADER, format_duration

__all__ = [
    "ResultWriter", "OutputError", "CSV_HEADER", "format_duration",
]
