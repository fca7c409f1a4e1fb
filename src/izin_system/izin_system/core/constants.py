"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 8
DEFAULT_LIST_LIMIT = 500
MAX_HISTORY_DAYS = 90
DEFAULT_OUTSTANDING_BALANCE = 0

# Pilihan yang ditampilkan di form wali santri; teks bebas tetap diterima ("Lainnya").
ALASAN_PULANG_OPTIONS = (
    "Acara Keluarga",
    "Izin Organisasi/Event Kampus",
    "Kerja Praktik",
    "KKN",
    "Lomba",
    "PPL",
    "Praktik Kesehatan",
    "Sakit",
    "Seminar",
    "Lainnya",
)

KELUHAN_SAKIT_OPTIONS = (
    "Demam",
    "Flu/Batuk",
    "Sakit Kepala",
    "Sakit Perut",
    "Mual/Muntah",
    "Diare",
    "Pusing",
    "Alergi",
    "Nyeri Otot/Sendi",
    "Lainnya",
)
