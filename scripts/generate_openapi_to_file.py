"""Script to dump the admin API's openapi.yaml to a persistent location for inspection."""
import yaml
from pathlib import Path
from crmgen.main import app

output_dir = Path(__file__).parent.parent / "test_output"
output_dir.mkdir(exist_ok=True)
openapi_path = output_dir / "openapi.yaml"

document = app.openapi()
openapi_path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")

print("=" * 60)
print("OPENAPI.YAML GENERATION")
print("=" * 60)
print(f"Paths documented: {len(document.get('paths', {}))}")
print(f"Schemas documented: {len(document.get('components', {}).get('schemas', {}))}")
print(f"\nGenerated file location:")
print(f"  {openapi_path.absolute()}")
