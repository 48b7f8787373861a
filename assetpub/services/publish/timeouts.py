from __future__ import annotations

# API reads (run list, artifact list)
GH_TIMEOUT_SECONDS = 60.0

# Transfers scale with artifact size
GH_DOWNLOAD_TIMEOUT_SECONDS = 30 * 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0
