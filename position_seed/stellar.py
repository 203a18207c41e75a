# position_seed/stellar.py

"""
================================================================================
STELLAR PHYSICS CHAIN
================================================================================
Table- and formula-driven stellar properties, all in solar units:

    IMF roll -> mass -> luminosity -> radius -> temperature -> spectral class

plus the habitable zone and frost line used to place planets. Every input
roll comes from a salted coordinate hash, so a star is a pure function of its
position and the universe seed.

Data Contract:
---------------
- mass in [MIN_STELLAR_MASS, MAX_STELLAR_MASS] solar masses.
- luminosity / radius in solar units, temperature in Kelvin.
- Distances (habitable zone, frost line) in AU.
- Side Effects: None.
================================================================================
"""

import math
from collections import namedtuple

from . import config as DEFAULTS
from .layers import PropertyLayer, extract

SOLAR_TEMPERATURE_K = 5778.0
MIN_STELLAR_MASS = 0.08
MAX_STELLAR_MASS = 150.0
UNIVERSE_AGE_GYR = 13.8

# Salpeter-like IMF sampling: an exponential tail over [0, 0.9999) of the roll.
IMF_SLOPE = 2.35
IMF_MASS_SCALE = 2.5
IMF_ROLL_CEILING = 0.9999

# --- Spectral Classes ---
# Temperature bounds are used to classify a star from its physics; the mass,
# luminosity ranges and rarity are used to draw a star of a given class.
StarClass = namedtuple('StarClass', ['name', 'min_temp', 'max_temp', 'mass', 'luminosity', 'rarity'])

STAR_CLASSES = (
    StarClass('O', 30000.0, 52000.0, (16.0, 150.0), (30000.0, 1000000.0), 0.00003),
    StarClass('B', 10000.0, 30000.0, (2.1, 16.0), (25.0, 30000.0), 0.0013),
    StarClass('A', 7500.0, 10000.0, (1.4, 2.1), (5.0, 25.0), 0.006),
    StarClass('F', 6000.0, 7500.0, (1.04, 1.4), (1.5, 5.0), 0.03),
    StarClass('G', 5200.0, 6000.0, (0.8, 1.04), (0.6, 1.5), 0.076),
    StarClass('K', 3700.0, 5200.0, (0.45, 0.8), (0.08, 0.6), 0.121),
    StarClass('M', 2400.0, 3700.0, (0.08, 0.45), (0.0001, 0.08), 0.765),
)
STAR_CLASS_BY_NAME = {sc.name: sc for sc in STAR_CLASSES}


def imf_mass(roll: float) -> float:
    """Stellar mass from a unit roll; low masses are far more common."""
    exponent = -math.log(1.0 - roll * IMF_ROLL_CEILING) / IMF_SLOPE
    return min(max(MIN_STELLAR_MASS + exponent * IMF_MASS_SCALE, MIN_STELLAR_MASS), MAX_STELLAR_MASS)


def luminosity_from_mass(mass: float) -> float:
    """Piecewise main-sequence mass-luminosity relation."""
    if mass < 0.43:
        return mass ** 2.3
    if mass < 2.0:
        return mass ** 4.0
    if mass < 55.0:
        return 1.4 * mass ** 3.5
    return 32000.0 * mass


def radius_from_mass(mass: float) -> float:
    return mass ** 0.8 if mass < 1.0 else mass ** 0.57


def temperature_from(luminosity: float, radius: float) -> float:
    """Stefan-Boltzmann in solar units: T / T_sun = L^(1/4) / R^(1/2)."""
    return SOLAR_TEMPERATURE_K * luminosity ** 0.25 / radius ** 0.5


def spectral_class(temperature: float) -> StarClass:
    """Class whose temperature band contains `temperature`; M below the table, O above it."""
    if temperature >= STAR_CLASSES[0].max_temp:
        return STAR_CLASSES[0]
    for sc in STAR_CLASSES:
        if sc.min_temp <= temperature < sc.max_temp:
            return sc
    return STAR_CLASSES[-1]


def spectral_subclass(temperature: float, sc: StarClass) -> int:
    """0 (hottest) to 9 (coolest) within the class."""
    position = (temperature - sc.min_temp) / (sc.max_temp - sc.min_temp)
    return min(9, max(0, math.floor(9 - position * 10)))


def habitable_zone(luminosity: float) -> tuple:
    """(inner, outer) edge of the habitable zone in AU."""
    return math.sqrt(luminosity / 1.1), math.sqrt(luminosity / 0.53)


def frost_line(luminosity: float) -> float:
    return 2.7 * math.sqrt(luminosity)


def absolute_magnitude(luminosity: float) -> float:
    return 4.83 - 2.5 * math.log10(luminosity)


def pick_star_class(roll: float) -> StarClass:
    """Walks the cumulative class rarities; rolls past the table are M dwarfs."""
    cumulative = 0.0
    for sc in STAR_CLASSES:
        cumulative += sc.rarity
        if roll < cumulative:
            return sc
    return STAR_CLASSES[-1]


# --- Stellar Forge ---

FORGE_LAYERS = (
    PropertyLayer.float_range('mass_roll', DEFAULTS.SALT_FORGE_MASS, 0.0, 1.0),
    PropertyLayer.float_range('age_roll', DEFAULTS.SALT_FORGE_AGE, 0.0, 1.0),
    PropertyLayer.float_range('metallicity', DEFAULTS.SALT_FORGE_METALLICITY, -2.5, 0.5),
)


def forge_star(coord, seed: int) -> dict:
    """
    Derives a main-sequence star at an integer 2-D or 3-D coordinate.

    Returns a dict with mass, luminosity, radius, temperature (rounded K),
    spectral_class, spectral_subclass, full_class (e.g. 'G2V'), age (Gyr,
    capped at the age of the universe), metallicity ([Fe/H], dex),
    absolute_magnitude, hz_inner and hz_outer (AU) and frost_line (AU).
    """
    rolls = extract(coord, FORGE_LAYERS, seed)

    mass = imf_mass(rolls['mass_roll'])
    luminosity = luminosity_from_mass(mass)
    radius = radius_from_mass(mass)
    temperature = temperature_from(luminosity, radius)
    sc = spectral_class(temperature)
    subclass = spectral_subclass(temperature, sc)
    hz_inner, hz_outer = habitable_zone(luminosity)

    # Massive stars burn out sooner.
    age = rolls['age_roll'] * (10.0 / mass ** 2.5)

    return {
        'coordinates': tuple(coord),
        'mass': mass,
        'luminosity': luminosity,
        'radius': radius,
        'temperature': round(temperature),
        'spectral_class': sc.name,
        'spectral_subclass': subclass,
        'full_class': f"{sc.name}{subclass}V",
        'age': min(age, UNIVERSE_AGE_GYR),
        'metallicity': rolls['metallicity'],
        'absolute_magnitude': absolute_magnitude(luminosity),
        'hz_inner': hz_inner,
        'hz_outer': hz_outer,
        'frost_line': frost_line(luminosity),
    }
