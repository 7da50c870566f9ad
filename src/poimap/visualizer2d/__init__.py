# visualizer2d/__init__.py
"""
matplotlib によるマップビューポート。

- TileOverlay: {z}_{x}_{y}.png タイルの貼り合わせ
- MarkerLayer: リコンサイラ向けのマーカー操作（作成 / 削除 / アイコン差し替え / ダブルクリック）
- CategoryPanel: カテゴリのチェックボックス
- cli: 起動スクリプト
"""
__all__ = ["cli", "config", "markers", "overlay", "panel", "projection", "renderer"]
