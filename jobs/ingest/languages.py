from functools import lru_cache
from pathlib import Path
from typing import Dict, List

import yaml

TABLE_PATH = Path(__file__).with_name("country_languages.yml")
DEFAULT_KEY = "DEFAULT"


@lru_cache(maxsize=1)
def load_table() -> Dict[str, List[str]]:
    """
    Country -> ordered review languages, most likely first.
    Read once per process; callers must not mutate the returned lists.
    """
    data = yaml.safe_load(TABLE_PATH.read_text(encoding="utf-8"))
    table = {str(code).upper(): [str(lang) for lang in langs] for code, langs in data.items()}
    if DEFAULT_KEY not in table:
        raise RuntimeError(f"{TABLE_PATH.name} has no {DEFAULT_KEY} entry")
    return table


def languages_for(country: str) -> List[str]:
    table = load_table()
    return list(table.get((country or "").strip().upper(), table[DEFAULT_KEY]))


def supported_countries() -> List[str]:
    return [code for code in load_table() if code != DEFAULT_KEY]
