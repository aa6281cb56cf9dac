from .magnetometer import MagnetometerSample as MagnetometerSample
