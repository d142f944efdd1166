#!/usr/bin/env python3
"""Sample camera dataset generator.

Generates synthetic camera spreadsheets (.csv or .xlsx) in the upload
template layout: header row first, one camera per following row. Optionally
corrupts a share of the rows (blank required cells, bad phone numbers,
malformed or future dates) to exercise the validation report.
"""
from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

from cctv_import.models.camera_record import CAMERA_FIELDS

CITIES = {
    "Chandigarh": (30.7333, 76.7794),
    "Ludhiana": (30.9010, 75.8573),
    "Amritsar": (31.6340, 74.8723),
    "Jalandhar": (31.3260, 75.5762),
}
DEVICE_TYPES = ["Dome", "Bullet", "PTZ", "Box", "Fisheye"]
ORGANIZATIONS = ["Traders Association", "Residents Welfare Society", "Municipal Corporation", "Private Shop"]
CORRUPTIONS = ["missing", "phone", "date_format", "future_date"]


def generate_cameras(rows: int, seed: int = 42, invalid_ratio: float = 0.0) -> pd.DataFrame:
    """Generate a DataFrame of camera rows.

    Args:
        rows: Number of data rows
        seed: Random seed for reproducible data
        invalid_ratio: Share of rows (0..1) receiving one deliberate defect

    Returns:
        DataFrame with one column per template field (all strings)
    """
    rng = np.random.default_rng(seed)
    today = date.today()
    city_names = list(CITIES)

    data: dict[str, list[str]] = {f: [] for f in CAMERA_FIELDS}
    for i in range(rows):
        city = city_names[int(rng.integers(len(city_names)))]
        base_lat, base_lon = CITIES[city]
        data["ownerName"].append(f"Owner {i + 1}")
        data["phoneNumber"].append(str(int(rng.integers(6_000_000_000, 9_999_999_999))))
        data["deviceName"].append(f"Cam-{i + 1:05d}")
        data["deviceType"].append(str(rng.choice(DEVICE_TYPES)))
        data["latitude"].append(f"{base_lat + rng.uniform(-0.05, 0.05):.6f}")
        data["longitude"].append(f"{base_lon + rng.uniform(-0.05, 0.05):.6f}")
        data["address"].append(f"{int(rng.integers(1, 999))} Market Road")
        data["city"].append(city)
        data["organization"].append(str(rng.choice(ORGANIZATIONS)))
        data["workingCondition"].append("Working" if rng.random() < 0.85 else "Not Working")
        data["policeId"].append(f"PB{int(rng.integers(1000, 9999))}")
        data["dateChecked"].append((today - timedelta(days=int(rng.integers(0, 365)))).isoformat())
        data["username"].append(f"officer{int(rng.integers(1, 20))}")

    df = pd.DataFrame(data, columns=list(CAMERA_FIELDS))

    n_bad = int(rows * invalid_ratio)
    if n_bad:
        for idx in rng.choice(rows, size=n_bad, replace=False):
            kind = CORRUPTIONS[int(rng.integers(len(CORRUPTIONS)))]
            if kind == "missing":
                df.at[idx, str(rng.choice(list(CAMERA_FIELDS)))] = ""
            elif kind == "phone":
                df.at[idx, "phoneNumber"] = "12345"
            elif kind == "date_format":
                df.at[idx, "dateChecked"] = today.strftime("%Y/%m/%d")
            else:
                df.at[idx, "dateChecked"] = (today + timedelta(days=30)).isoformat()
    return df


def write_dataset(df: pd.DataFrame, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower()
    if suffix == ".csv":
        df.to_csv(output_path, index=False)
    elif suffix == ".xlsx":
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Cameras", index=False)
    else:
        raise ValueError(f"unsupported output type: {output_path.name} (use .csv or .xlsx)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic camera spreadsheets for import testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s cameras.csv --rows 500
  %(prog)s cameras.xlsx --rows 200 --invalid-ratio 0.1 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output file (.csv or .xlsx)")
    parser.add_argument("--rows", type=int, default=100, help="Number of camera rows (default: 100)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--invalid-ratio", type=float, default=0.0, help="Share of rows with a deliberate defect (0..1)"
    )
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.invalid_ratio <= 1.0:
        print("Error: --invalid-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    try:
        df = generate_cameras(args.rows, seed=args.seed, invalid_ratio=args.invalid_ratio)
        write_dataset(df, args.output)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Created camera dataset: {args.output}")
    print(f"  Rows: {args.rows} (defective: {int(args.rows * args.invalid_ratio)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
