# Path: anki_lang/__main__.py
from anki_lang.main import main

if __name__ == "__main__":
    main()
