# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/             <- Directorio de trabajo (en sys.path automáticamente)
#   ├── wsgi.py            <- Este archivo
#   ├── pyproject.toml
#   └── field_service/     <- Paquete Python
#       ├── main.py
#       ├── models/
#       ├── services/
#       └── repositories/
#
# Variables de entorno: ver field_service/config.py
# ==============================================================================

import logging

from field_service.main import create_app

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = create_app()

# ==============================================================================
# PUNTO DE ENTRADA
# ==============================================================================
# Para desarrollo local:
#   python wsgi.py
# ==============================================================================

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
