import os


def get_file_list(path: str) -> list:
	if os.path.isfile(path):
		return [path]
	files = []
	for root, dirs, names in os.walk(path):
		dirs.sort()
		for name in sorted(names):
			files.append(os.path.join(root, name))
	if len(files) == 0 and not os.path.isdir(path):
		raise FileNotFoundError(2, "No such file or directory", path)
	return files


def prepare_output_dir(path: str):
	os.makedirs(path, exist_ok=True)
