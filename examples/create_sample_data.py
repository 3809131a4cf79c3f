"""Crée des fichiers de démonstration pour DataMatch."""

import json
from pathlib import Path

import pandas as pd

DATA_DIR = Path(__file__).parent / "data"
DATA_DIR.mkdir(exist_ok=True)

opportunities = pd.DataFrame({
    "opportunityId": ["OPP-1", "OPP-2", "OPP-3", "OPP-4"],
    "opportunityName": ["Acme sensors", "Globex MCU", "Initech display", "Umbrella audio"],
    "customerName": ["Acme Corp", "Globex", "Initech Ltd.", "Umbrella"],
    "productGroup": ["Sensors", "Microcontrollers", "Displays", "Audio"],
    "productName": ["X100", "MCU-32", "LCD7", "AMP2"],
    "customerNameSalePersonCode": ["S1", "S2", "S3", "S4"],
    "s9DWINEntryDate": ["2024-01-10", "2024-02-01", "2024-03-15", "2024-04-01"],
})

transactions = pd.DataFrame({
    "rowKey": ["R1", "R2", "R3", "R4"],
    "custShortDimName": ["Acme Corporation", "Globex", "Initech", "Stark"],
    "custAppDimName": ["Sensors", "Microcontrollers", "Displays", "Power"],
    "prodChipNameDimName": ["X100", "MCU-32", "LCD7", "PWR9"],
    "salespersonDimName": ["S1", "S2", "S3", "S9"],
    "documentDate": ["2024-01-20", "2024-02-01", "2024-05-01", "2024-04-01"],
    "quantity": ["100", "250", "40", "10"],
})

opportunities.to_excel(DATA_DIR / "opportunities.xlsx", index=False, engine="openpyxl")
transactions.to_csv(DATA_DIR / "transactions.csv", index=False)
(DATA_DIR / "config.json").write_text(
    json.dumps(
        {
            "external_source": {"file": "opportunities.xlsx"},
            "internal_source": {"file": "transactions.csv"},
            "auto_threshold": 80,
        },
        indent=2,
    ),
    encoding="utf-8",
)
print(f"Fichiers créés dans {DATA_DIR}")
