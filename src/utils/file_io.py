"""General file I/O utilities for saving and loading data."""

import json
from pathlib import Path
from typing import Any


def save_json_atomic(data: Any, output_path: Path) -> None:
    """
    Save data as compact JSON, replacing the target file atomically.
    
    The data is written to a sibling temporary file first and then renamed
    over the target, so readers never observe a partially written file.
    
    Args:
        data: JSON-serializable data to save
        output_path: Path to output JSON file
    """
    output_path = Path(output_path)
    temp_file = output_path.with_name(output_path.name + '.tmp')
    with open(temp_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, separators=(',', ':'))
    
    # Atomic rename
    temp_file.replace(output_path)


def load_json(input_path: Path) -> Any:
    """
    Load and parse a UTF-8 JSON file.
    
    Args:
        input_path: Path to JSON file
        
    Returns:
        Parsed JSON data
    """
    with open(input_path, 'r', encoding='utf-8') as f:
        return json.load(f)
