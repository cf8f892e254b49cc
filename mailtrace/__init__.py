"""mailtrace - delivery timeline reconstruction from raw email headers"""

__version__ = "0.1.0"
