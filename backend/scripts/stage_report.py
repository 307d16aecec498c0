"""
Print where the two status → stage schemes disagree, and any section that a
role lists as both default-visible and advanced.

Run from the backend/ directory:
    python scripts/stage_report.py
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.order_detail_service import describe_stage_divergence, find_section_config_gaps


def main():
    rows = describe_stage_divergence()
    print(f"status_to_stage vs classifier: {len(rows)} disagreement(s)")
    for row in rows:
        print(
            f"  status={row['status']:<16} sizesValidated={row['sizesValidated']!s:<5} "
            f"invoice={row['hasInvoice']!s:<5} map={row['statusToStage']} "
            f"classifier={row['classifiedStage']}"
        )

    gaps = find_section_config_gaps()
    print(f"\nsections both default-visible and advanced: {len(gaps)} role(s)")
    for role, sections in gaps.items():
        print(f"  {role}: {', '.join(sections)}")


if __name__ == "__main__":
    main()
