# Example: pyGrowatt Usage Demo
# -----------------------------
# This script demonstrates how to pull live telemetry for a Growatt account using the pyGrowatt library.
#
# Usage:
#   - Set your credentials below, or use a .env file with the following variables:
#       GROWATT_USERNAME, GROWATT_PASSWORD, GROWATT_TIMEZONE
#   - Run: python example.py

import pygrowatt
import dotenv
import os

# Load environment variables from .env file if present
dotenv.load_dotenv()

# Enable debug logging for more verbose output (optional for learning)
# pygrowatt.set_debug(True)

username = os.getenv('GROWATT_USERNAME', 'email@example.com')
password = os.getenv('GROWATT_PASSWORD', 'password')

print(f"Connecting to Growatt as {username}...")
gw = pygrowatt.Growatt(username, password)

# --- Account Summary ---
result = gw.fetch()
if result.error:
    print("Unable to read account: %s" % result.error)
    raise SystemExit(1)

print("Status: %s - Plants: %d - Last update: %s" % (result.status, result.plant_count, result.last_update))
print("Current Power: %0.3f kW" % result.current_power)
print("Generated Today: %0.1f kWh" % result.daily_energy)
print("Generated Total: %0.1f kWh" % result.total_energy)
print("CO2 Saved: %0.2f t" % result.co2_saved)
if result.partial:
    print("Deadline reached - unresolved plants: %r" % result.unresolved_plants)
print("")

# --- Per Plant Breakdown ---
for summary in result.plants:
    plant = summary.plant
    print(f" Plant {plant.name} ({plant.plant_id})")
    print(f"   Current Power: {summary.current_power:.3f} kW (source: {summary.source or 'unresolved'})")
    print(f"   Today: {plant.today_energy:.1f} kWh - Total: {plant.total_energy:.1f} kWh - {plant.status}")

# --- Raw JSON Payload Example ---
if result.plants:
    print("\nEnergy raw: %r" % gw.plant_energy(result.plants[0].plant.plant_id))
