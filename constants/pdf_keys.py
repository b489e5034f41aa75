"""
PDF Dictionary Keys and Name Constants
"""

# Page Keys
KEY_CONTENTS = "/Contents"
KEY_PARENT = "/Parent"

# Resource Dictionary Keys
KEY_RESOURCES = "/Resources"
KEY_XOBJECT = "/XObject"
KEY_FONT = "/Font"
KEY_COLOR_SPACE = "/ColorSpace"
KEY_PROC_SET = "/ProcSet"

# Object Types and Subtypes
KEY_TYPE = "/Type"
KEY_SUBTYPE = "/Subtype"
VAL_XOBJECT = "/XObject"
VAL_IMAGE = "/Image"

# Image Properties
KEY_WIDTH = "/Width"
KEY_HEIGHT = "/Height"
KEY_BITS_PER_COMPONENT = "/BitsPerComponent"
KEY_FILTER = "/Filter"
KEY_IMAGE_MASK = "/ImageMask"
KEY_N = "/N"

# Filters
VAL_FLATE_DECODE = "/FlateDecode"
VAL_DCT_DECODE = "/DCTDecode"

# Color Space Names (full names and inline-image abbreviations)
VAL_DEVICE_GRAY = "/DeviceGray"
VAL_DEVICE_RGB = "/DeviceRGB"
VAL_DEVICE_CMYK = "/DeviceCMYK"
VAL_CAL_GRAY = "/CalGray"
VAL_CAL_RGB = "/CalRGB"
VAL_ICC_BASED = "/ICCBased"
VAL_INDEXED = "/Indexed"
VAL_SEPARATION = "/Separation"
VAL_PATTERN = "/Pattern"

GRAY_COLOR_SPACE_NAMES = {VAL_DEVICE_GRAY, VAL_CAL_GRAY, "/G"}
RGB_COLOR_SPACE_NAMES = {VAL_DEVICE_RGB, VAL_CAL_RGB, "/RGB"}
CMYK_COLOR_SPACE_NAMES = {VAL_DEVICE_CMYK, "/CMYK"}
INDEXED_COLOR_SPACE_NAMES = {VAL_INDEXED, "/I"}

# Font Dictionary Keys
KEY_FONT_FILE_2 = "/FontFile2"
VAL_WIN_ANSI_ENCODING = "/WinAnsiEncoding"
