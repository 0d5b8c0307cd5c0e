from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from .models import CandidateCriteria, Car

_INVENTORY_CSV = Path(__file__).resolve().parent.parent / "data" / "cars.csv"

_INT_COLUMNS = ["id", "year", "price", "mileage", "horsepower"]
_FLOAT_COLUMNS = ["engine_size", "fuel_consumption"]

_df: pd.DataFrame | None = None


class CarNotFound(LookupError):
    def __init__(self, car_id: int) -> None:
        super().__init__(f"Car {car_id} not found")
        self.car_id = car_id


def _load(path: Path = _INVENTORY_CSV) -> pd.DataFrame:
    df = pd.read_csv(path)

    for col in _INT_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("Int64")
    for col in _FLOAT_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    # Features are pipe-separated in the CSV
    df["features_list"] = (
        df["features"]
        .fillna("")
        .apply(lambda s: [f.strip() for f in str(s).split("|") if f.strip()])
    )
    df["make_lower"] = df["make"].fillna("").str.lower()
    df["status"] = df["status"].fillna("available").str.lower()
    return df


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory inventory DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = _load()
    return _df


def set_dataframe(df: pd.DataFrame | None) -> None:
    """Replace the loaded inventory (``None`` reloads from disk on next use)."""
    global _df
    _df = df


def _optional(value):
    if value is None or (not isinstance(value, list) and pd.isna(value)):
        return None
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    return value


def _row_to_car(row: pd.Series) -> Car:
    return Car(
        id=int(row["id"]),
        make=row["make"],
        model=row["model"],
        year=int(row["year"]),
        price=int(row["price"]),
        mileage=_optional(row.get("mileage")),
        color=_optional(row.get("color")),
        body_type=_optional(row.get("body_type")),
        transmission=_optional(row.get("transmission")),
        fuel_type=_optional(row.get("fuel_type")),
        features=row["features_list"],
        horsepower=_optional(row.get("horsepower")),
        engine_size=_optional(row.get("engine_size")),
        fuel_consumption=_optional(row.get("fuel_consumption")),
        status=row["status"],
    )


def all_cars() -> list[Car]:
    return [_row_to_car(row) for _, row in get_dataframe().iterrows()]


def get_car(car_id: int) -> Car:
    df = get_dataframe()
    match = df.loc[df["id"] == car_id]
    if match.empty:
        raise CarNotFound(car_id)
    return _row_to_car(match.iloc[0])


def get_cars(car_ids: list[int]) -> list[Car]:
    """Return cars in the order requested; raises on the first unknown id."""
    return [get_car(car_id) for car_id in car_ids]


def fetch_candidates(criteria: CandidateCriteria) -> list[Car]:
    """Return every car matching *criteria*, in inventory order."""
    df = get_dataframe()
    mask = pd.Series(True, index=df.index)

    if criteria.status is not None:
        mask &= df["status"] == criteria.status.value

    if criteria.make:
        mask &= df["make_lower"] == criteria.make.strip().lower()

    if criteria.year_min is not None:
        mask &= df["year"] >= criteria.year_min
    if criteria.year_max is not None:
        mask &= df["year"] <= criteria.year_max

    if criteria.price_min is not None:
        mask &= df["price"] >= criteria.price_min
    if criteria.price_max is not None:
        mask &= df["price"] <= criteria.price_max

    return [_row_to_car(row) for _, row in df.loc[mask.fillna(False)].iterrows()]
