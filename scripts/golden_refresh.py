from __future__ import annotations
import json, os, subprocess, sys, tempfile
from pathlib import Path

ROOT     = Path(__file__).resolve().parents[1]
SAMPLES  = ROOT / "tests" / "samples"
BASELINE = ROOT / "tests" / "golden" / "summary.json"
FROZEN   = ("single_redemption.csv", "random.csv", "non_converging.csv")

def main() -> int:
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT), env.get("PYTHONPATH")]))

    baseline = {}
    for name in FROZEN:
        sample = SAMPLES / name
        if not sample.exists():
            print(f"[x] Missing sample: {sample}", file=sys.stderr)
            return 2
        with tempfile.TemporaryDirectory() as tmp:
            cmd = [
                sys.executable, "-m", "xirr_solver",
                str(sample),
                "--outputs-dir", tmp,
                "--format", "json",
            ]
            subprocess.run(cmd, check=True, env=env, cwd=ROOT, stdout=subprocess.DEVNULL)
            sj = Path(tmp) / "summary.json"
            if not sj.exists():
                print("[x] summary.json not produced; check CLI/run_file", file=sys.stderr)
                return 3
            data = json.loads(sj.read_text(encoding="utf-8"))
        # Keep only the rate to keep the baseline slim & stable
        baseline[name] = data.get("xirr")

    BASELINE.parent.mkdir(parents=True, exist_ok=True)
    BASELINE.write_text(json.dumps(baseline, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    print(f"[ok] Wrote baseline {BASELINE}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
