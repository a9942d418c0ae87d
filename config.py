# config.py
SCHEMA_VERSION = "2026-10-19-polyline-inspector-v1"

# Format Encoded Polyline (octets imprimables [63, 126])
ENCODING_OFFSET = 63
CHUNK_BITS = 5
CHUNK_MASK = 0x1F
CONTINUATION_BIT = 0x20
MAX_CHUNK = 0x3F
MIN_CHAR = ENCODING_OFFSET
MAX_CHAR = ENCODING_OFFSET + MAX_CHUNK  # 126 '~'

# Précision (nombre de décimales conservées)
DEFAULT_PRECISION = 5
MIN_PRECISION = 0
MAX_PRECISION = 7

# Tracé dégénéré (lat + lon, en degrés)
DEGENERATE_SPAN = 1e-4

# Couleurs de rendu
COLOR_PATH = "#f70707"         # rouge tracé décodé
COLOR_COMPARE = "#2ca02c"      # vert tracé de comparaison

# Carte (centrage par défaut)
DEFAULT_CENTER = (45.5017, -73.5673)  # Montréal
DEFAULT_ZOOM = 12
