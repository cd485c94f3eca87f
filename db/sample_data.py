# Sample SIGs used for smoke testing the parser
SAMPLE_SIGS = [
    "Take 1 tablet by mouth twice daily",
    "Take 2 capsules every 8 hours",
    "Take 10ml by mouth once daily",
    "1 tablet every 12 hours",
    "Take 1 tablet in the morning and 1 tablet at bedtime",
    "Take 2 tablets with food three times daily",
    "Take 1 capsule by mouth once daily",
    "Take 1-2 tablets every 4-6 hours as needed for pain",
    "Take 1 tablet in the morning",
    "Take 1 tablet by mouth twice daily with meals",
    "Take 2 tablets on day 1, then 1 tablet daily",
    "Take 1 tablet with breakfast, lunch, and dinner",
]

SAMPLE_DAYS_SUPPLY = [30, 60, 90, 7, 14, 28, 45, 100, 180, 365]

# Package records in the shape the NDC collaborator hands over
SAMPLE_PACKAGES = [
    {"identifier": "68180-0101-01", "unit": "TABLET", "quantity_per_package": 30,
     "active": True, "product_name": "Lisinopril 10mg", "dosage_form": "TABLET",
     "description": "30 TABLET in 1 BOTTLE"},
    {"identifier": "68180-0101-02", "unit": "TABLET", "quantity_per_package": 90,
     "active": True, "product_name": "Lisinopril 10mg", "dosage_form": "TABLET",
     "description": "90 TABLET in 1 BOTTLE"},
    {"identifier": "68180-0101-03", "unit": "TABLET", "quantity_per_package": 1000,
     "active": True, "product_name": "Lisinopril 10mg", "dosage_form": "TABLET",
     "description": "1000 TABLET in 1 BOTTLE"},
    {"identifier": "00069-1234-56", "unit": "TABLET", "quantity_per_package": 100,
     "active": False, "product_name": "Lisinopril 10mg", "dosage_form": "TABLET",
     "description": "100 TABLET in 1 BOTTLE"},
]

SAMPLE_REQUEST = {
    "drug_name": "Lisinopril",
    "sig": "Take 1 tablet by mouth twice daily",
    "days_supply": 30,
    "packages": SAMPLE_PACKAGES,
}
