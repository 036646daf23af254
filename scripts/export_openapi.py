#!/usr/bin/env python3
"""
Export the OpenAPI schema of the dashboard API to a JSON file.
"""
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sensor_dashboard.main import app

if __name__ == "__main__":
    output_file = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).parent.parent / "openapi.json"

    openapi_schema = app.openapi()

    with open(output_file, "w") as f:
        json.dump(openapi_schema, f, indent=2)

    print(f"OpenAPI schema exported to {output_file}")
    print(f"  Title: {openapi_schema.get('info', {}).get('title')}")
    print(f"  Endpoints: {len(openapi_schema.get('paths', {}))}")
