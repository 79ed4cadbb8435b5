#!/usr/bin/env python
"""
Convenience script to run the Streamlit UI for PO Sentinel.

Usage:
    python run_ui.py
"""

import subprocess
import sys
from pathlib import Path

def main():
    """Run the Streamlit UI."""

    app_path = Path(__file__).parent / "sentinel" / "ui" / "streamlit_app.py"

    if not app_path.exists():
        print(f"❌ Error: Streamlit app not found at {app_path}")
        sys.exit(1)

    print("🚀 Starting PO Sentinel...")
    print(f"📍 App: {app_path}")
    print("")
    print("The dashboard will open in your browser at: http://localhost:8501")
    print("Press Ctrl+C to stop the server")
    print("")

    try:
        subprocess.run(
            [sys.executable, "-m", "streamlit", "run", str(app_path)],
            check=False
        )
    except KeyboardInterrupt:
        print("\n✅ Streamlit server stopped")
        sys.exit(0)
    except Exception as e:
        print(f"❌ Error running Streamlit: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
