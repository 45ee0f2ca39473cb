"""
The `constants` module defines the mathematical, time and atmospheric constants used by celestjax.
"""

from math import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

"""
Constant to convert radians to arcseconds. Equal to (360*3600)/(2pi). Units: *as/rad*
"""
RAD2AS = 360.0 * 3600.0 / PI / 2.0

"""
Constant to convert hours of right ascension to radians. Equal to 2pi/24. Units: *rad/h*
"""
HOUR2RAD = 2.0 * PI / 24.0

"""
Constant to convert radians to hours of right ascension. Equal to 24/2pi. Units: *h/rad*
"""
RAD2HOUR = 24.0 / (2.0 * PI)

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
JD2000 = 2451545.0

"""
Modified Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
MJD2000 = 51544.5

"""
Number of SI seconds in one day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

"""
Earliest Julian Date accepted by the calendar conversions (-4713-11-24 12:00
proleptic Gregorian). Units: *days*
"""
JD_FLOOR = 0.0

# Atmospheric Constants

"""
Standard sea-level pressure. Units: *hPa*
"""
SEA_LEVEL_PRESSURE_HPA = 1013.25

"""
Sea-level temperature of the standard atmosphere used for observer defaults. Units: *K*
"""
SEA_LEVEL_TEMP_K = 288.2

"""
Offset between the Kelvin and Celsius temperature scales. Units: *K*
"""
CELSIUS_TO_KELVIN = 273.15

"""
Scale factor of the isothermal barometric formula. Multiplied by the sea-level
temperature it gives the pressure scale height. Units: *m/K*
"""
BAROMETRIC_SCALE = 29.3

"""
Default observing wavelength (visible light). Units: *um*
"""
DEFAULT_WAVELENGTH_UM = 0.5

"""
Default observer latitude (Royal Observatory Greenwich). Units: *deg*
"""
DEFAULT_LATITUDE_DEG = 51.4778

"""
Margin below the geometric horizon beyond which atmospheric refraction is not
applied. Units: *rad*
"""
REFRACTION_HORIZON_MARGIN = 2.0 * DEG2RAD
