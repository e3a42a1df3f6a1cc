''' A script for converting JAudio instrument banks, wave banks and waves between binary, XML, YAML and SoundFont '''

# Imports
import sys

# Ensure /jaudio is present and can be imported
try:
  from jaudio.Cli import main

except ImportError as e:
  print("Error: One or more required modules are missing.")
  print(f"Details: {e}")
  print("\nPlease ensure the 'jaudio' package and its dependencies (PyYAML) are installed.")
  sys.exit(1)

if __name__ == '__main__':
  sys.exit(main())
