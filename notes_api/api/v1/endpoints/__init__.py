# Version 1 endpoint modules
