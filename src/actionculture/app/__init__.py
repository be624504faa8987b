"""Front-end léger (ligne de commande, formatage des retours utilisateur)."""
