# src/geoquery/io/config.py
import json
from pathlib import Path

from geoquery.config.models import EngineModel


def load_engine_config(path: str | Path) -> EngineModel:
    with open(path, encoding="utf-8") as f:
        return EngineModel.model_validate(json.load(f))
