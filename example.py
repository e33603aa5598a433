"""Example usage of the typed_lesser library."""

from typed_lesser import Schema, of, sort_slice

# Declare the element type using the DSL
types = """
define celsius as float64

Reading {
    sensor: string,
    _: uint32,
    temp: celsius,
    samples: int16[3],
}
"""

schema = Schema.parse(types)

readings = schema.make_slice(
    "Reading",
    [
        {"sensor": "roof", "temp": 12.5, "samples": [3, 1, 2]},
        {"sensor": "cellar", "temp": 9.0, "samples": [0, 0, 0]},
        {"sensor": "roof", "temp": float("nan"), "samples": [7, 7, 7]},
        {"sensor": "roof", "temp": 12.5, "samples": [3, 0, 9]},
        {"sensor": "attic", "temp": 21.0, "samples": [1, 2, 3]},
    ],
)

# Build the less function once: sensor, then temp (NaN first), then samples
less = of(readings)
sort_slice(readings, less)

print("Sorted readings:")
for reading in readings:
    print(f"  {reading['sensor']:<8} {reading['temp']:>6} {reading['samples']}")

# The same less function keeps working as the slice is refilled
readings.clear()
readings.extend(
    [
        {"sensor": "b", "temp": 1.0, "samples": [0, 0, 0]},
        {"sensor": "a", "temp": 2.0, "samples": [0, 0, 0]},
    ]
)
sort_slice(readings, less)
print("\nRefilled and sorted:", [r["sensor"] for r in readings])
