"""Script to create a sample circuit list Excel file for testing."""

import pandas as pd
from pathlib import Path


def create_sample_circuit_list():
    """Create a sample circuit list Excel file."""

    # Sample circuit data
    circuits = [
        # Feed cable f1 - 48 fibers
        {"Cable": "f1", "Circuit ID": "pon,1-12", "Remarks": "OLT port 1"},
        {"Cable": "f1", "Circuit ID": "pon,13-24", "Remarks": "OLT port 2"},
        {"Cable": "f1", "Circuit ID": "lg,1-12", "Remarks": "Leased lines"},
        {"Cable": "f1", "Circuit ID": "xe,1-12", "Remarks": "10G backhaul"},

        # Distribution cable d1 - 24 fibers
        {"Cable": "d1", "Circuit ID": "pon,1-4", "Remarks": "Street A"},
        {"Cable": "d1", "Circuit ID": "pon,5-8", "Remarks": "Street B"},
        {"Cable": "d1", "Circuit ID": "lg,3-6", "Remarks": "Business park"},
        {"Cable": "d1", "Circuit ID": "xe,1-12", "Remarks": "Tower"},

        # Distribution cable d2 - 12 fibers
        {"Cable": "d2", "Circuit ID": "pon,13-20", "Remarks": "Estate"},
        {"Cable": "d2", "Circuit ID": "lg,7-10", "Remarks": "School"},
    ]

    # Create DataFrame
    df = pd.DataFrame(circuits)

    # Save to Excel
    output_dir = Path(__file__).parent
    output_path = output_dir / "sample_circuit_list.xlsx"

    df.to_excel(output_path, index=False, sheet_name="Circuits")

    print(f"Created sample circuit list: {output_path}")
    print(f"Total circuits: {len(circuits)}")
    print("\nCircuit summary by cable:")
    for cable in df["Cable"].unique():
        count = len(df[df["Cable"] == cable])
        print(f"  Cable {cable}: {count} circuits")

    return output_path


if __name__ == "__main__":
    create_sample_circuit_list()
