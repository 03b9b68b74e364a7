"""Deterministic demo tables for the CLI and tests.

Produces Gaussian blobs in 3D, one blob per cluster label, split across one
or more tables the way a host returns several queries. A small share of the
coordinates is replaced with NaN/Infinity/None to exercise sanitisation.
"""

import numpy as np

from types_models import DataField, DataFrame, FieldType

DEFAULT_LABELS = ("setosa", "versicolor", "virginica")


def generate_example_tables(
    *,
    n_tables: int = 2,
    rows_per_table: int = 30,
    labels: tuple[str, ...] = DEFAULT_LABELS,
    invalid_fraction: float = 0.05,
    seed: int = 42,
) -> list[DataFrame]:
    """Return *n_tables* tables with ``x, y, z, clusterLabel`` columns."""
    if n_tables <= 0 or rows_per_table <= 0:
        raise ValueError("n_tables and rows_per_table must be positive")
    if not labels:
        raise ValueError("labels must not be empty")

    # Reproducible randomness
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-10.0, 10.0, size=(len(labels), 3))

    tables: list[DataFrame] = []
    for table_index in range(n_tables):
        label_idx = rng.integers(0, len(labels), size=rows_per_table)
        coords = centers[label_idx] + rng.normal(0.0, 1.5, size=(rows_per_table, 3))
        coords = np.round(coords, 3)

        columns: list[list[float | None]] = [list(map(float, coords[:, axis])) for axis in range(3)]
        invalid = rng.random(size=(rows_per_table, 3)) < invalid_fraction
        for row, axis in zip(*np.nonzero(invalid)):
            columns[axis][row] = [float("nan"), float("inf"), None][(row + axis) % 3]

        tables.append(
            DataFrame(
                ref_id=chr(ord("A") + table_index % 26),
                fields=[
                    DataField(name="x", type=FieldType.NUMBER, values=columns[0]),
                    DataField(name="y", type=FieldType.NUMBER, values=columns[1]),
                    DataField(name="z", type=FieldType.NUMBER, values=columns[2]),
                    DataField(
                        name="clusterLabel",
                        type=FieldType.STRING,
                        values=[labels[i] for i in label_idx],
                    ),
                ],
            )
        )
    return tables


__all__ = ["DEFAULT_LABELS", "generate_example_tables"]
