import sys
import os

# --- CORREÇÃO DE PATH ---
# Garante que 'pylaje' seja encontrado ao rodar direto da raiz do projeto.
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from pylaje.ui.cli import CommandLineInterface

def main():
    """
    Ponto de entrada principal do PyLaje.
    Inicia a Interface de Linha de Comando (CLI).
    """
    try:
        app = CommandLineInterface()
        app.run()
    except KeyboardInterrupt:
        print("\nInterrompido pelo usuário.")
        sys.exit(0)

if __name__ == "__main__":
    main()
