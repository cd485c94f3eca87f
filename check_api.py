#!/usr/bin/env python3
"""
Smoke check for a running Prescription Dispense Calculator API.
Sends a SIG and days' supply (plus the sample package list) and displays the response.
"""

import json
import sys

import requests

from config import settings
from db.sample_data import SAMPLE_PACKAGES

def check_api(sig, days_supply):
    """Call the calculate endpoint and print the dispense plan."""
    url = f"http://{settings.host}:{settings.port}/api/v1/calculate/"
    api_key = settings.api_key

    payload = {
        "drug_name": "Lisinopril",
        "sig": sig,
        "days_supply": days_supply,
        "packages": SAMPLE_PACKAGES,
    }

    # Set headers with API key
    headers = {
        "X-API-Key": api_key
    }

    print(f"Sending '{sig}' for {days_supply} days to the API...")

    try:
        # Make the API request
        response = requests.post(url, json=payload, headers=headers, timeout=10)

        # Check if the request was successful
        if response.status_code == 200:
            result = response.json()

            print("\nAPI Response:")
            print(json.dumps(result, indent=2))

            calculation = result.get("result") or {}
            print(f"\nTotal quantity: {calculation.get('total_quantity')} {calculation.get('unit')}")
            for i, item in enumerate(calculation.get("dispense_plan", []), 1):
                print(f"{i}. {item['package']['identifier']} x {item['count']} = {item['total_quantity']}")
            for warning in calculation.get("warnings", []):
                print(f"   [{warning['severity']}] {warning['message']}")

        else:
            print(f"Error: API returned status code {response.status_code}")
            print(response.text)

    except requests.exceptions.RequestException as e:
        print(f"Error calling API: {e}")

if __name__ == "__main__":
    if len(sys.argv) > 2:
        check_api(sys.argv[1], int(sys.argv[2]))
    else:
        print("Usage: python check_api.py \"Take 1 tablet twice daily\" 30")
        sys.exit(1)
