import os
import json
import math
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class ResultsReporter:
    def __init__(self, report_dir):
        self.report_dir = report_dir
        os.makedirs(report_dir, exist_ok=True)

    def generate_report(self, summary, results, attributes, outcomes=()):
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        scan_id = f"SCAN-{timestamp}"
        filename = f"{scan_id}.json"
        filepath = os.path.join(self.report_dir, filename)

        files = []
        for row in results:
            entropy = row.get("entropy")
            if isinstance(entropy, float) and math.isnan(entropy):
                entropy = None
            files.append(dict(row, entropy=entropy))

        report = {
            "scan_id": scan_id,
            "generated_at": datetime.now().isoformat(),
            "summary": {
                "processed": summary.get("processed", 0),
                "succeeded": summary.get("succeeded", 0),
                "failed": summary.get("failed", 0),
            },
            "files": files,
            "errors": [o.to_dict() for o in outcomes if not o.ok],
            "attributes": attributes,
            "attribute_count": len(attributes),
        }

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, default=str)

        logger.info("Scan report written: %s", filepath)
        return filepath
