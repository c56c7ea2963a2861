import pandas as pd

from mapping import ExportSchema


def load_csv(path: str, schema: ExportSchema) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, header=0 if schema.has_header else None)
    if schema.has_header:
        df.columns = [c.strip() for c in df.columns]
    return df
