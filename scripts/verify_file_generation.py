"""Simple script to verify scaffold generation and teardown for the sample Task model."""
import tempfile
from pathlib import Path
from crmgen.generators.scaffold.generator import SAMPLE_SPEC, generate_model, teardown

with tempfile.TemporaryDirectory() as temp_dir:
    out_dir = Path(temp_dir)
    artifacts = generate_model(SAMPLE_SPEC, out_dir)

    print("=" * 60)
    print("FILE GENERATION TEST")
    print("=" * 60)
    missing = [p for p in artifacts.paths() if not (out_dir / p).exists()]
    for path in artifacts.paths():
        print(f"  {path}: {'ok' if path not in missing else 'MISSING'}")

    routes_index = (out_dir / "routes/__init__.py").read_text(encoding="utf-8")
    print(f"\nroutes index registers task: {'# model: task' in routes_index}")

    # Show first few lines of the model
    lines = (out_dir / artifacts.files["model"]).read_text(encoding="utf-8").splitlines()[:10]
    print("\nFirst 10 lines of generated model:")
    for i, line in enumerate(lines, 1):
        print(f"  {i:2}: {line}")

    removed = teardown(artifacts, out_dir)
    print(f"\nRemoved on teardown: {len(removed)} files")

    if missing:
        print("\nFAILURE: some files were NOT generated!")
        exit(1)
    print("\nSUCCESS: all files were generated and removed!")
